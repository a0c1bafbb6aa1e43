from __future__ import annotations

from typing import Mapping

import pandas as pd
from plotnine import (
    aes,
    coord_flip,
    element_text,
    geom_boxplot,
    geom_col,
    geom_histogram,
    geom_hline,
    geom_point,
    geom_smooth,
    ggplot,
    labs,
    scale_color_manual,
    scale_fill_manual,
    theme,
)
from plotnine.composition import Compose

from ..plots import panel_tags, panel_title
from .base import Lesson

NOTES = """\
Faceting repeats one chart. A **compound figure** puts different charts
together so they tell one story, with panel tags (A, B, C) for the text to
refer to. Charts combine with `|` (side by side) and `/` (stacked), and the
operators nest: `a / (b | c)` puts one wide chart above two narrow ones.

For the 2016 presidential election, panel A ranks states by Clinton's
margin; panel B asks whether the margin depends on a state's number of
electoral votes. Each panel title carries its tag.

For the athletes of the Australian Institute of Sport, panel A compares
hematocrit between sports, ordered by median so the ranking is readable.
Panels B and C show body size: height against weight with a separate
least-squares line per sex, and the distribution of body-mass index.

Keep a consistent color meaning across panels: here sex is always the
same two colors, so one legend is enough to read the whole figure.
"""

EXERCISES = (
    "Rebuild the election figure with the two panels stacked. Which layout suits a ranked list of 51 states?",
    "Give the athletes figure a title and switch the tags to lower-case letters.",
    "Replace the BMI histogram by a boxplot of body fat by sex. Does the figure still need panel C?",
    "Why would facet_wrap be the wrong tool for the election figure?",
)


SEX_COLORS = {"f": "#dd8452", "m": "#4c72b0"}
WINNER_COLORS = {"Clinton": "#4c72b0", "Trump": "#c44e52"}


def election_margins(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out["margin"] = out["clinton"] - out["trump"]
    out["winner"] = out["margin"].map(lambda m: "Clinton" if m > 0 else "Trump")
    return out.sort_values("margin").reset_index(drop=True)


def election_figure(df: pd.DataFrame, tags: str | None = "A") -> Compose:
    margins = election_margins(df)
    margins["state"] = pd.Categorical(margins["state"], categories=margins["state"].tolist(), ordered=True)
    a, b = panel_tags(2, tags)
    ranked = (
        ggplot(margins, aes(x="state", y="margin", fill="winner"))
        + geom_col()
        + coord_flip()
        + scale_fill_manual(values=WINNER_COLORS)
        + labs(title=panel_title(a, "Clinton margin by state"), x="State", y="Margin (percentage points)", fill="Winner")
        + theme(axis_text_y=element_text(size=6))
    )
    by_votes = (
        ggplot(margins, aes(x="electoral_votes", y="margin", color="winner"))
        + geom_hline(yintercept=0, color="grey")
        + geom_point(size=2.5)
        + scale_color_manual(values=WINNER_COLORS)
        + labs(
            title=panel_title(b, "Margin vs electoral votes"),
            x="Electoral votes",
            y="Margin (percentage points)",
            color="Winner",
        )
    )
    return ranked | by_votes


def athletes_figure(df: pd.DataFrame, tags: str | None = "A") -> Compose:
    a, b, c = panel_tags(3, tags)
    order = df.groupby("sport")["hc"].median().sort_values().index.tolist()
    sports = df.assign(sport=pd.Categorical(df["sport"], categories=order, ordered=True))
    by_sport = (
        ggplot(sports, aes(x="sport", y="hc"))
        + geom_boxplot()
        + labs(title=panel_title(a, "Hematocrit by sport"), x="Sport", y="Hematocrit (%)")
        + theme(axis_text_x=element_text(rotation=45, ha="right"))
    )
    size = (
        ggplot(df, aes(x="ht", y="wt", color="sex"))
        + geom_point(size=1.2)
        + geom_smooth(method="lm", se=False)
        + scale_color_manual(values=SEX_COLORS)
        + labs(title=panel_title(b, "Height and weight"), x="Height (cm)", y="Weight (kg)", color="Sex")
    )
    bmi = (
        ggplot(df, aes(x="bmi", fill="sex"))
        + geom_histogram(bins=20, alpha=0.7, position="identity")
        + scale_fill_manual(values=SEX_COLORS)
        + labs(title=panel_title(c, "Body-mass index"), x="BMI", y="Athletes", fill="Sex")
    )
    return by_sport / (size | bmi)


class CompositionLesson(Lesson):
    name = "composition"
    title = "Compound figures"
    version = "1.0.0"
    summary = "Combining different charts into one tagged figure for the 2016 election and elite athletes."
    concepts = ("compound figures", "panel tags", "nesting", "consistent color")
    datasets = ("election", "athletes")
    notes = NOTES
    exercises = EXERCISES
    figure_titles = {
        "election": "US presidential election 2016",
        "athletes": "Australian Institute of Sport athletes",
    }

    def figures(self, data: Mapping[str, pd.DataFrame]) -> dict[str, Compose]:
        return {
            "election": election_figure(data["election"]),
            "athletes": athletes_figure(data["athletes"]),
        }
