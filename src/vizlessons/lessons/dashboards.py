from __future__ import annotations

from typing import Mapping

import pandas as pd
from plotnine import ggplot

from ..dashboard import ExplorerState, default_state, explorer_chart, murders_chart, year_choices
from .base import Lesson

NOTES = """\
A reactive dashboard is a page whose outputs recompute whenever an input
changes. The bundled app (`vizlessons dashboard`) is written with
Streamlit, whose model is deliberately simple: every time a widget changes,
the whole script runs again from the top with the new widget values. There
are no callbacks to wire up; the chart is simply a function of the current
inputs.

The Gapminder explorer has four inputs: a year slider, a continent
multiselect, the two variables to plot and a log-scale toggle. Each run
filters the data to the chosen year and continents, builds the same plotnine
chart used throughout the course and draws it. A summary table
under the chart is another output of the same inputs.

Rerunning everything is only fast if expensive work is not repeated, so the
app caches the dataset load with `st.cache_data`: the CSV is read once per
session, while filtering and plotting rerun on every change.

The figures below are what the explorers show with their default inputs.
"""

EXERCISES = (
    "Add a 'minimum population' number input to the Gapminder explorer. Which function has to change?",
    "Move the year slider into the sidebar. Does anything about reactivity change?",
    "Remove st.cache_data from the loader and watch the app while dragging the slider. What happens and why?",
    "Add a second output to the murders explorer showing the region summary as a bar chart.",
)


class DashboardsLesson(Lesson):
    name = "dashboards"
    title = "Reactive dashboards"
    version = "1.0.0"
    summary = "Turning charts into small interactive explorers where outputs follow inputs."
    concepts = ("reactivity", "inputs and outputs", "rerun model", "caching")
    datasets = ("gapminder", "murders")
    notes = NOTES
    exercises = EXERCISES

    def figures(self, data: Mapping[str, pd.DataFrame]) -> dict[str, ggplot]:
        gm = data["gapminder"]
        state = default_state(gm)
        figures = {"gapminder_explorer_default": explorer_chart(gm, state)}
        gdp_years = year_choices(gm, ("gdp", "life_expectancy")) if "gdp" in gm.columns else []
        if gdp_years:
            log_state = ExplorerState(
                year=gdp_years[-1],
                continents=state.continents,
                x="gdp_per_capita",
                y="life_expectancy",
                log_x=True,
            )
            figures["gapminder_explorer_gdp"] = explorer_chart(gm, log_state)
        figures["murders_explorer_default"] = murders_chart(data["murders"])
        return figures
