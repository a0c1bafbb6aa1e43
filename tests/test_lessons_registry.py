from __future__ import annotations

import matplotlib.pyplot as plt
import pytest
from plotnine import aes, geom_point, ggplot, labs
from plotnine.composition import Compose

from vizlessons.lessons import Lesson, LessonRegistry
from vizlessons.lessons.composition import CompositionLesson, election_figure
from vizlessons.lessons.grammar_basics import GrammarBasicsLesson
from vizlessons.plots import draw_plot, plot_title
from vizlessons.samples import make_sample


def test_lessons_listed_in_course_order() -> None:
    assert LessonRegistry().list_lessons() == [
        "grammar_basics",
        "small_multiples",
        "composition",
        "tidy_data",
        "time_series",
        "dashboards",
    ]


def test_describe_lesson() -> None:
    meta = LessonRegistry().describe_lesson("tidy_data")
    assert meta["name"] == "tidy_data"
    assert meta["datasets"] == ["tb"]
    assert meta["exercises"] > 0
    assert set(meta) == {"name", "title", "version", "summary", "concepts", "datasets", "exercises"}


def test_unknown_lesson_is_key_error() -> None:
    with pytest.raises(KeyError, match="Unknown lesson"):
        LessonRegistry().get_lesson("pie_charts")


def test_duplicate_or_unnamed_registration_fails() -> None:
    registry = LessonRegistry()
    with pytest.raises(ValueError):
        registry.register(GrammarBasicsLesson)

    class Nameless(Lesson):
        pass

    with pytest.raises(ValueError):
        registry.register(Nameless)


@pytest.mark.parametrize("name", LessonRegistry().list_lessons())
def test_every_lesson_builds_drawable_figures_from_samples(name: str) -> None:
    lesson = LessonRegistry().get_lesson(name)
    assert lesson.title and lesson.summary and lesson.notes.strip()
    assert lesson.exercises
    data = {ds: make_sample(ds) for ds in lesson.datasets}
    plots = lesson.figures(data)
    assert plots
    for fig_name, plot in plots.items():
        assert isinstance(plot, (ggplot, Compose))
        assert lesson.figure_title(fig_name, plot)
        fig = draw_plot(plot)
        assert fig.axes
        plt.close(fig)


def test_figure_title_prefers_explicit_then_plot_then_name(small_frame) -> None:
    untitled = ggplot(small_frame, aes(x="x", y="y")) + geom_point()
    lesson = GrammarBasicsLesson()
    assert lesson.figure_title("rate_histogram", untitled) == "Rate histogram"
    assert lesson.figure_title("x", untitled + labs(title="Shown")) == "Shown"

    composition = CompositionLesson()
    figure = untitled | untitled
    assert composition.figure_title("election", figure) == "US presidential election 2016"
    assert composition.figure_title("side_by_side", figure) == "Side by side"


def test_composition_panels_carry_tags() -> None:
    figure = election_figure(make_sample("election"), tags="a")
    titles = [plot_title(p) for p in figure.items]
    assert titles == ["a. Clinton margin by state", "b. Margin vs electoral votes"]


@pytest.mark.parametrize("gdp", ["missing", "empty"])
def test_dashboards_lesson_skips_gdp_figure_without_gdp(gdp: str) -> None:
    gm = make_sample("gapminder")
    gm = gm.drop(columns=["gdp"]) if gdp == "missing" else gm.assign(gdp=float("nan"))
    data = {"gapminder": gm, "murders": make_sample("murders")}
    plots = LessonRegistry().get_lesson("dashboards").figures(data)
    assert list(plots) == ["gapminder_explorer_default", "murders_explorer_default"]
