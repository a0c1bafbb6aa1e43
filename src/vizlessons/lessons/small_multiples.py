from __future__ import annotations

from typing import Mapping

import pandas as pd
from plotnine import aes, facet_grid, facet_wrap, geom_line, geom_point, ggplot, labs, theme

from .base import Lesson

COMPARISON_YEARS = (1962, 2012)
WRAP_YEARS = (1962, 1970, 1980, 1990, 2000, 2012)

NOTES = """\
Small multiples repeat one chart for each level of a categorical variable,
on shared axes, so the eye compares panels instead of decoding a legend.

The classic Gapminder question is whether the world still splits into
"western" countries with long lives and small families and "developing"
countries with short lives and large families. Faceting fertility against
life expectancy by continent (rows) and year (columns) answers it at a
glance: in 1962 the two clusters are clear, fifty years later most of the
world has moved to the top left.

`facet_grid` fixes both dimensions and keeps empty cells so rows and
columns line up. `facet_wrap` takes one variable and wraps its panels onto
as many rows as needed, which suits a longer sequence of years. All panels
share their scales by default; this is what makes the comparison honest.
Free scales (`scales="free_y"`) are useful only when the panels measure
different things.
"""

EXERCISES = (
    "Redo the grid with scales='free'. Which conclusion from the fixed-scale version is now hard to see?",
    "Facet by region instead of continent. How many panels do you need, and does facet_wrap pick a sensible layout?",
    "Add 1990 to the comparison years. When did Asia close the gap?",
    "Plot life expectancy over time for all countries of one continent, colored by country. Why is faceting better here?",
)


def available_years(df: pd.DataFrame, wanted: tuple[int, ...]) -> list[int]:
    """The wanted years present in the data; falls back to first and last year."""
    present = set(int(y) for y in df.dropna(subset=["fertility", "life_expectancy"])["year"].unique())
    years = [y for y in wanted if y in present]
    if years:
        return years
    ordered = sorted(present)
    return sorted({ordered[0], ordered[-1]}) if ordered else []


class SmallMultiplesLesson(Lesson):
    name = "small_multiples"
    title = "Faceting and small multiples"
    version = "1.0.0"
    summary = "Comparing many panels on shared scales with facet_grid and facet_wrap on the Gapminder panel."
    concepts = ("facet_grid", "facet_wrap", "shared scales", "panel ordering")
    datasets = ("gapminder",)
    notes = NOTES
    exercises = EXERCISES

    def figures(self, data: Mapping[str, pd.DataFrame]) -> dict[str, ggplot]:
        gm = data["gapminder"].dropna(subset=["fertility", "life_expectancy"])

        grid_years = available_years(gm, COMPARISON_YEARS)
        grid_df = gm[gm["year"].isin(grid_years)]
        wrap_years = available_years(gm, WRAP_YEARS)
        wrap_df = gm[gm["year"].isin(wrap_years)]

        return {
            "fertility_life_grid": ggplot(grid_df, aes(x="fertility", y="life_expectancy", color="continent"))
            + geom_point(size=1.5)
            + facet_grid("continent ~ year")
            + labs(
                title="Fertility and life expectancy by continent",
                x="Fertility (children per woman)",
                y="Life expectancy (years)",
                color="Continent",
            )
            + theme(figure_size=(7, 9)),
            "fertility_life_wrap": ggplot(wrap_df, aes(x="fertility", y="life_expectancy", color="continent"))
            + geom_point(size=1.2)
            + facet_wrap("year")
            + labs(
                title="The world moves to the top left",
                x="Fertility (children per woman)",
                y="Life expectancy (years)",
                color="Continent",
            ),
            "life_expectancy_trends": ggplot(gm, aes(x="year", y="life_expectancy", group="country"))
            + geom_line(size=0.4, alpha=0.6, color="#4c72b0")
            + facet_wrap("continent")
            + labs(title="Life expectancy by country", x="Year", y="Life expectancy (years)"),
        }
