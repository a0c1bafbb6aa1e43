from __future__ import annotations

from typing import Any, Mapping

import pandas as pd

from ..plots import Plot, plot_title


class Lesson:
    """
    One lecture document as code.

    Subclasses set the metadata class attributes and implement figures(),
    which receives every dataset listed in `datasets` already loaded and
    returns named plotnine plots / compositions in reading order.
    Compositions have no title of their own; `figure_titles` supplies one.
    """

    name: str = ""
    title: str = ""
    version: str = "1.0.0"
    summary: str = ""
    concepts: tuple[str, ...] = ()
    datasets: tuple[str, ...] = ()
    notes: str = ""
    exercises: tuple[str, ...] = ()
    figure_titles: Mapping[str, str] = {}

    def figures(self, data: Mapping[str, pd.DataFrame]) -> dict[str, Plot]:
        raise NotImplementedError

    def figure_title(self, name: str, plot: Plot) -> str:
        return self.figure_titles.get(name) or plot_title(plot) or name.replace("_", " ").capitalize()

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "version": self.version,
            "summary": self.summary,
            "concepts": list(self.concepts),
            "datasets": list(self.datasets),
            "exercises": len(self.exercises),
        }
