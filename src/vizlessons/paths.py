from __future__ import annotations

from pathlib import Path

from .config import Settings


def output_root(settings: Settings) -> Path:
    return settings.output_dir


def lesson_dir(settings: Settings, lesson_name: str) -> Path:
    return output_root(settings) / lesson_name


def figures_dir(lesson_path: Path) -> Path:
    return lesson_path / "figures"


def manifest_path(lesson_path: Path) -> Path:
    return lesson_path / "manifest.json"


def lesson_md_path(lesson_path: Path) -> Path:
    return lesson_path / "lesson.md"


def cache_path(settings: Settings, filename: str) -> Path:
    """
    Downloaded datasets live under the cache directory (system temp by default)
    so the working tree only ever holds rendered lessons.
    """
    base = settings.cache_dir
    base.mkdir(parents=True, exist_ok=True)
    return base / filename
