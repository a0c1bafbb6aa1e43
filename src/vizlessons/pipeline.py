from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

import pandas as pd

from .config import Settings, load_settings
from .datasets import dataset_record, load_dataset_with_source
from .lessons import LessonRegistry
from .models import DatasetRecord, FigureRecord, RenderManifest
from .paths import figures_dir, lesson_md_path, manifest_path
from .plots import plot_kind, save_plot
from .report import build_lesson_markdown
from .utils import safe_slug, write_json

logger = logging.getLogger(__name__)


def render_lesson(
    name: str,
    *,
    settings: Optional[Settings] = None,
    out_root: Optional[Path] = None,
    sources: Optional[Mapping[str, Path | str]] = None,
    registry: Optional[LessonRegistry] = None,
) -> RenderManifest:
    """
    Render one lesson to <out_root>/<lesson>/.

    Always writes:
      figures/<figure>.png, lesson.md, manifest.json
    """
    settings = settings or load_settings()
    registry = registry or LessonRegistry()
    sources = sources or {}
    lesson = registry.get_lesson(name)

    ldir = (out_root or settings.output_dir) / lesson.name
    fdir = figures_dir(ldir)
    fdir.mkdir(parents=True, exist_ok=True)

    # Each dataset is read once per lesson.
    data: dict[str, pd.DataFrame] = {}
    records: list[DatasetRecord] = []
    for ds in lesson.datasets:
        df, src = load_dataset_with_source(ds, sources.get(ds), settings)
        data[ds] = df
        records.append(dataset_record(ds, df, src))

    figures: list[FigureRecord] = []
    for fig_name, plot in lesson.figures(data).items():
        slug = safe_slug(fig_name)
        save_plot(plot, fdir / f"{slug}.png", dpi=settings.dpi)
        figures.append(
            FigureRecord(
                name=slug,
                title=lesson.figure_title(fig_name, plot),
                path=f"figures/{slug}.png",
                kind=plot_kind(plot),
            )
        )

    md_path = lesson_md_path(ldir)
    md_path.write_text(build_lesson_markdown(lesson, figures, records), encoding="utf-8")

    manifest = RenderManifest(
        lesson=lesson.name,
        title=lesson.title,
        version=lesson.version,
        lesson_dir=str(ldir),
        lesson_md=str(md_path),
        manifest_json=str(manifest_path(ldir)),
        figures=figures,
        datasets=records,
    )
    write_json(manifest_path(ldir), manifest.model_dump(mode="json"))
    logger.info("Rendered lesson %s: %d figure(s) in %s", lesson.name, len(figures), ldir)
    return manifest


def render_all(
    *,
    settings: Optional[Settings] = None,
    out_root: Optional[Path] = None,
    sources: Optional[Mapping[str, Path | str]] = None,
) -> list[RenderManifest]:
    registry = LessonRegistry()
    return [
        render_lesson(name, settings=settings, out_root=out_root, sources=sources, registry=registry)
        for name in registry.list_lessons()
    ]


def load_manifest(lesson_path: Path) -> RenderManifest:
    return RenderManifest.model_validate_json(manifest_path(lesson_path).read_text(encoding="utf-8"))
