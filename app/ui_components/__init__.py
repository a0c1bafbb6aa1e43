"""UI components for the lesson explorers."""
from .header import render_explorer_header
from .plots import discover_lessons, render_lesson_figures

__all__ = [
    "render_explorer_header",
    "discover_lessons",
    "render_lesson_figures",
]
