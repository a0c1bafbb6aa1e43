from __future__ import annotations

from typing import Iterable

from .lessons.base import Lesson
from .models import DatasetRecord, FigureRecord


def _datasets_table(datasets: Iterable[DatasetRecord]) -> list[str]:
    lines = [
        "| Dataset | Rows | Columns | Source |",
        "|---|---:|---:|---|",
    ]
    for d in datasets:
        lines.append(f"| `{d.name}` | {d.rows:,} | {len(d.columns)} | {d.source_kind.value} |")
    return lines


def build_lesson_markdown(
    lesson: Lesson,
    figures: list[FigureRecord],
    datasets: list[DatasetRecord],
) -> str:
    """
    Render a lesson as a markdown document: prose first, then one section per
    figure, the data used and the exercises.
    """
    lines: list[str] = [f"# {lesson.title}", "", f"_{lesson.summary}_", ""]

    if lesson.concepts:
        lines.append("**Concepts:** " + ", ".join(lesson.concepts))
        lines.append("")

    lines.append("## Notes")
    lines.append("")
    lines.append(lesson.notes.strip())
    lines.append("")

    if figures:
        lines.append("## Figures")
        lines.append("")
        for i, fig in enumerate(figures, start=1):
            lines.append(f"### Figure {i}: {fig.title}")
            lines.append("")
            lines.append(f"![{fig.title}]({fig.path})")
            lines.append("")

    if datasets:
        lines.append("## Data")
        lines.append("")
        lines.extend(_datasets_table(datasets))
        lines.append("")

    if lesson.exercises:
        lines.append("## Exercises")
        lines.append("")
        for i, ex in enumerate(lesson.exercises, start=1):
            lines.append(f"{i}. {ex}")
        lines.append("")

    return "\n".join(lines)
