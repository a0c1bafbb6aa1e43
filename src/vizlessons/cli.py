from __future__ import annotations

import json
import logging
import subprocess
import sys
from pathlib import Path
from typing import Optional

import typer
from plotnine.exceptions import PlotnineError

from .config import ConfigError, Settings, load_settings
from .datasets import DatasetError, fetch_dataset, list_datasets
from .lessons import LessonRegistry
from .models import RenderManifest
from .pipeline import render_all, render_lesson
from .samples import write_samples
from .tidy import ReshapeError

app = typer.Typer(add_completion=False, help="Data-visualization lessons: datasets, figures and dashboards.")

# ---- Dataset commands ----
datasets_app = typer.Typer(help="Inspect, download or generate the lesson datasets.")
app.add_typer(datasets_app, name="datasets")

# ---- Lesson commands ----
lessons_app = typer.Typer(help="Inspect available lessons.")
app.add_typer(lessons_app, name="lessons")

_state: dict[str, bool] = {"verbose": False}

APP_PATH = Path(__file__).resolve().parents[2] / "app" / "app.py"


def _settings(**overrides: object) -> Settings:
    """Load settings and configure logging once per invocation."""
    try:
        settings = load_settings(**overrides)
    except ConfigError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=1)
    level = logging.DEBUG if _state["verbose"] else settings.log_level
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return settings


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output")) -> None:
    _state["verbose"] = verbose


@datasets_app.command("list")
def datasets_list() -> None:
    """
    List the catalogue: name, title and whether a public URL is known.
    """
    for info in list_datasets():
        where = "url" if info.url else "local only"
        typer.echo(f"{info.name:<10} {info.title} ({where})")


@datasets_app.command("fetch")
def datasets_fetch(
    name: list[str] = typer.Option([], "--name", help="Dataset to download (repeatable; default: all with a URL)"),
    force: bool = typer.Option(False, "--force", help="Download again even if cached"),
) -> None:
    """
    Download datasets into the cache directory.
    """
    settings = _settings()
    names = name or [info.name for info in list_datasets() if info.url]
    failed = 0
    for n in names:
        try:
            path = fetch_dataset(n, settings, force=force)
            typer.echo(f"{n}: {path}")
        except DatasetError as e:
            failed += 1
            typer.echo(f"ERROR: {e}", err=True)
    if failed:
        raise typer.Exit(code=1)


@datasets_app.command("sample")
def datasets_sample(
    out: Path = typer.Option(Path("sample_data"), "--out", help="Directory for the synthetic CSVs"),
) -> None:
    """
    Write synthetic stand-ins for every dataset. Point VIZLESSONS_DATA_DIR at
    the folder to render lessons offline.
    """
    _settings()
    for path in write_samples(out):
        typer.echo(str(path))


@lessons_app.command("list")
def lessons_list() -> None:
    """
    List lessons in course order.
    """
    registry = LessonRegistry()
    for name in registry.list_lessons():
        meta = registry.describe_lesson(name)
        typer.echo(f"{name:<16} {meta['title']} (v{meta['version']})")


@lessons_app.command("describe")
def lessons_describe(
    lesson: str = typer.Option(..., "--lesson", help="Lesson name to describe"),
) -> None:
    """
    Show lesson metadata as JSON with sorted keys.
    """
    registry = LessonRegistry()
    try:
        meta = registry.describe_lesson(lesson)
    except KeyError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(meta, indent=2, sort_keys=True))


def _echo_manifest(manifest: RenderManifest) -> None:
    typer.echo(f"Lesson: {manifest.lesson} ({manifest.title})")
    typer.echo(f"  dir: {manifest.lesson_dir}")
    typer.echo(f"  markdown: {manifest.lesson_md}")
    for fig in manifest.figures:
        typer.echo(f"  figure: {fig.path}")


@app.command()
def render(
    lesson: Optional[str] = typer.Option(None, "--lesson", help="Lesson to render"),
    all_lessons: bool = typer.Option(False, "--all", help="Render every lesson"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output root (default: VIZLESSONS_OUTPUT_DIR)"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Folder of local CSVs"),
    offline: Optional[bool] = typer.Option(None, "--offline/--online", help="Never fetch from the network"),
    dpi: Optional[int] = typer.Option(None, "--dpi", help="PNG resolution"),
) -> None:
    """
    Render lessons to figures/*.png, lesson.md and manifest.json.
    """
    if bool(lesson) == all_lessons:
        typer.echo("Pass exactly one of --lesson or --all.", err=True)
        raise typer.Exit(code=1)

    settings = _settings(output_dir=out, data_dir=data_dir, offline=offline, dpi=dpi)
    try:
        if all_lessons:
            manifests = render_all(settings=settings)
        else:
            manifests = [render_lesson(lesson, settings=settings)]
    except FileNotFoundError as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=2)
    except KeyError as e:
        typer.echo(f"ERROR: {e.args[0] if e.args else e}", err=True)
        raise typer.Exit(code=1)
    except (DatasetError, ReshapeError, PlotnineError) as e:
        typer.echo(f"ERROR: {e}", err=True)
        raise typer.Exit(code=1)

    for manifest in manifests:
        _echo_manifest(manifest)


@app.command()
def dashboard(
    port: int = typer.Option(8501, "--port", help="Port for the Streamlit server"),
) -> None:
    """
    Launch the reactive explorers (Streamlit).
    """
    if not APP_PATH.exists():
        typer.echo(f"ERROR: app not found at {APP_PATH}", err=True)
        raise typer.Exit(code=2)
    cmd = [sys.executable, "-m", "streamlit", "run", str(APP_PATH), "--server.port", str(port)]
    raise typer.Exit(code=subprocess.call(cmd))
