"""The lecture documents: each lesson builds its figures from loaded datasets."""

from .base import Lesson
from .registry import LessonRegistry

__all__ = ["Lesson", "LessonRegistry"]
