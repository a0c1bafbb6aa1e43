from __future__ import annotations

from typing import Mapping

import pandas as pd
from plotnine import aes, geom_histogram, geom_point, ggplot, labs

from ..dashboard import murder_rates, murders_chart, region_rate_chart
from .base import Lesson

NOTES = """\
A chart in the grammar of graphics is built from three things: **data**, a
set of **geometries** (points, lines, bars) and an **aesthetic mapping** that
says which column drives which visual property. Everything else (scales,
labels, reference lines) is added as further components.

We start from the 2010 US gun murders table: one row per state with its
population, region and number of murders. Mapping population to x, murders
to y and region to color gives a scatterplot; adding a text layer mapped to
the state abbreviation labels every point.

Both variables span several orders of magnitude, so we switch both axes to a
log10 scale. On log-log axes a constant murder rate is a straight line with
slope 1; the dashed reference line is the national rate, so states above it
are more dangerous than the country as a whole.

A single number per region hides the spread between states. The boxplot
orders regions by their median rate, and the histogram shows the whole
distribution of state rates.
"""

EXERCISES = (
    "Remove the log10 scales. Which states become impossible to read, and why?",
    "Map region to both color and the x position of a boxplot of murder rates. What does the second mapping add?",
    "Change the reference line to the rate of the safest region. Which states fall below it?",
    "Label only the ten most populous states by giving the text layer its own data.",
    "Compute the murder rate per 100,000 for the South without plotting. Does the histogram agree?",
)


class GrammarBasicsLesson(Lesson):
    name = "grammar_basics"
    title = "The grammar of graphics"
    version = "1.0.0"
    summary = "Data, geometries and aesthetic mappings, built up layer by layer on the US murders table."
    concepts = ("aesthetic mapping", "layers", "log scales", "reference lines", "labels")
    datasets = ("murders",)
    notes = NOTES
    exercises = EXERCISES

    def figures(self, data: Mapping[str, pd.DataFrame]) -> dict[str, ggplot]:
        murders = data["murders"]
        rates = murder_rates(murders)
        return {
            "points_only": ggplot(rates, aes(x="population_millions", y="total"))
            + geom_point(size=3)
            + labs(title="Step 1: points", x="Population in millions", y="Total murders"),
            "murders_scatter": murders_chart(murders),
            "rate_by_region": region_rate_chart(murders),
            "rate_histogram": ggplot(rates, aes(x="rate"))
            + geom_histogram(bins=15)
            + labs(title="Distribution of state murder rates", x="Murders per 100,000", y="States"),
        }
