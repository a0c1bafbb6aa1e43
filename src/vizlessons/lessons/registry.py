from __future__ import annotations

from typing import Any

from .base import Lesson
from .composition import CompositionLesson
from .dashboards import DashboardsLesson
from .grammar_basics import GrammarBasicsLesson
from .small_multiples import SmallMultiplesLesson
from .tidy_data import TidyDataLesson
from .time_series import TimeSeriesLesson

BUILTIN_LESSONS: tuple[type[Lesson], ...] = (
    GrammarBasicsLesson,
    SmallMultiplesLesson,
    CompositionLesson,
    TidyDataLesson,
    TimeSeriesLesson,
    DashboardsLesson,
)


class LessonRegistry:
    """
    Registry of available lessons in course order.
    Keeps deterministic metadata for CLI inspection.
    """

    def __init__(self) -> None:
        self._lessons: dict[str, type[Lesson]] = {}
        for cls in BUILTIN_LESSONS:
            self.register(cls)

    def register(self, lesson_cls: type[Lesson]) -> None:
        name = getattr(lesson_cls, "name", "")
        if not name:
            raise ValueError("Lesson name must be provided.")
        if name in self._lessons:
            raise ValueError(f"Lesson '{name}' is already registered.")
        self._lessons[name] = lesson_cls

    def list_lessons(self) -> list[str]:
        return list(self._lessons)

    def get_lesson(self, name: str) -> Lesson:
        try:
            return self._lessons[name]()
        except KeyError:
            raise KeyError(f"Unknown lesson '{name}'. Available: {self.list_lessons()}") from None

    def describe_lesson(self, name: str) -> dict[str, Any]:
        return self.get_lesson(name).describe()
