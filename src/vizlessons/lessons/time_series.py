from __future__ import annotations

from typing import Mapping

import pandas as pd
from plotnine import aes, coord_flip, facet_wrap, geom_col, geom_line, geom_point, ggplot, labs

from ..tidy import tidy_bacteria
from .base import Lesson

NOTES = """\
Time series of many parallel measurements, here the relative abundance of
several bacterial taxa in repeated samples from a few subjects, are hard to
read as one crowded line chart. After reshaping the table to one row per
subject, day and taxon, two layouts are natural.

Faceting by taxon puts one panel per organism with a line per subject:
good for asking whether subjects agree. Faceting by subject shows each
person's community over time: good for spotting a shift in one individual.
Which variable becomes a panel and which becomes a color decides which
comparison is easy.

Abundances of different taxa live on very different scales, so the taxon
panels use free y scales. The bar chart of mean abundance gives the overall
ranking that the panels leave implicit.
"""

EXERCISES = (
    "Swap the roles of subject and taxon in the first figure. Which question becomes easier to answer?",
    "Switch the taxon panels back to fixed scales. What disappears?",
    "Add points on top of the lines. When do the points help?",
    "Compute each taxon's change between the first and last day per subject with pivot_wider.",
)


class TimeSeriesLesson(Lesson):
    name = "time_series"
    title = "Small multiples for time series"
    version = "1.0.0"
    summary = "Choosing panels and colors for repeated measurements of bacterial abundance."
    concepts = ("tidy time series", "facet choice", "free scales", "lines and points")
    datasets = ("bacteria",)
    notes = NOTES
    exercises = EXERCISES

    def figures(self, data: Mapping[str, pd.DataFrame]) -> dict[str, ggplot]:
        tidy = tidy_bacteria(data["bacteria"])
        # subjects are categories even when stored as numbers
        tidy["subject"] = tidy["subject"].astype(str)
        means = (
            tidy.groupby("taxon", as_index=False)["abundance"].mean().sort_values("abundance", ascending=True)
        )
        means["taxon"] = pd.Categorical(means["taxon"], categories=means["taxon"].tolist(), ordered=True)
        return {
            "abundance_by_taxon": ggplot(tidy, aes(x="day", y="abundance", color="subject"))
            + geom_line()
            + geom_point(size=1)
            + facet_wrap("taxon", scales="free_y")
            + labs(title="Abundance per taxon", x="Day", y="Relative abundance", color="Subject"),
            "abundance_by_subject": ggplot(tidy, aes(x="day", y="abundance", color="taxon"))
            + geom_line()
            + facet_wrap("subject")
            + labs(title="Community over time per subject", x="Day", y="Relative abundance", color="Taxon"),
            "mean_abundance": ggplot(means, aes(x="taxon", y="abundance"))
            + geom_col(fill="#55a868")
            + coord_flip()
            + labs(title="Mean relative abundance", x="Taxon", y="Mean abundance"),
        }
