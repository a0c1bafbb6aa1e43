from __future__ import annotations

from typing import Mapping

import pandas as pd
from plotnine import aes, facet_wrap, geom_col, geom_line, ggplot, labs

from ..tidy import tidy_tb
from .base import Lesson

NOTES = """\
Plotting functions want **tidy** data: each variable is a column, each
observation a row. The WHO tuberculosis table is not tidy. Its columns such as
`new_sp_m014` pack three variables into a name (diagnosis `sp`, sex `m` and
age group `0-14`) and spread the case counts over dozens of columns.

`pivot_longer` turns those columns into rows. With a `names_pattern` of
three capture groups, each column name is split into `diagnosis`, `sex` and
`age` in the same step, and `drop_na=True` removes the country-years where
nothing was reported. Relapse columns are spelled `newrel_` in the source;
we rename them first so one pattern fits all.

Once the data is tidy, every chart below is one grouping plus one mapping:
cases per year and sex, the same split by age group in small multiples, and
total cases by diagnosis. `pivot_wider` goes back the other way when a table
for humans is needed.
"""

EXERCISES = (
    "Count the rows and columns of the raw and tidy tables. Which one has more cells, and why?",
    "Use pivot_wider to build a table with one row per country and year and one column per sex.",
    "Check the tidy table with is_tidy using country, year, diagnosis, sex and age as keys.",
    "Plot the share of cases among women per age group over time. Which reshaping step do you need first?",
)


class TidyDataLesson(Lesson):
    name = "tidy_data"
    title = "Tidy data for plotting"
    version = "1.0.0"
    summary = "Reshaping the WHO tuberculosis table from wide to long before plotting it."
    concepts = ("tidy data", "pivot_longer", "names_pattern", "pivot_wider", "group and summarise")
    datasets = ("tb",)
    notes = NOTES
    exercises = EXERCISES

    def figures(self, data: Mapping[str, pd.DataFrame]) -> dict[str, ggplot]:
        tidy = tidy_tb(data["tb"])

        by_sex = tidy.groupby(["year", "sex"], as_index=False)["cases"].sum()
        by_age = tidy.groupby(["year", "age", "sex"], as_index=False)["cases"].sum()
        by_dx = (
            tidy.groupby("diagnosis", as_index=False)["cases"].sum().sort_values("cases", ascending=False)
        )
        by_dx["diagnosis"] = pd.Categorical(by_dx["diagnosis"], categories=by_dx["diagnosis"].tolist(), ordered=True)

        return {
            "cases_by_sex": ggplot(by_sex, aes(x="year", y="cases", color="sex"))
            + geom_line()
            + labs(title="New tuberculosis cases by sex", x="Year", y="Cases", color="Sex"),
            "cases_by_age": ggplot(by_age, aes(x="year", y="cases", color="sex"))
            + geom_line()
            + facet_wrap("age", scales="free_y")
            + labs(title="New cases by age group", x="Year", y="Cases", color="Sex"),
            "cases_by_diagnosis": ggplot(by_dx, aes(x="diagnosis", y="cases"))
            + geom_col(fill="#4c72b0")
            + labs(title="Total cases by diagnosis", x="Diagnosis", y="Cases"),
        }
