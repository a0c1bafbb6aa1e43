from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from vizlessons.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in list(os.environ):
        if key.startswith("VIZLESSONS_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("VIZLESSONS_CACHE_DIR", str(tmp_path / "cache"))


def test_lessons_list() -> None:
    result = runner.invoke(app, ["lessons", "list"])
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert lines[0].startswith("grammar_basics")
    assert len(lines) == 6


def test_lessons_describe() -> None:
    result = runner.invoke(app, ["lessons", "describe", "--lesson", "small_multiples"])
    assert result.exit_code == 0
    meta = json.loads(result.output)
    assert meta["name"] == "small_multiples"
    assert meta["datasets"] == ["gapminder"]


def test_lessons_describe_unknown() -> None:
    result = runner.invoke(app, ["lessons", "describe", "--lesson", "nope"])
    assert result.exit_code == 1


def test_datasets_list_marks_local_only() -> None:
    result = runner.invoke(app, ["datasets", "list"])
    assert result.exit_code == 0
    bacteria = [line for line in result.output.splitlines() if line.startswith("bacteria")]
    assert bacteria and "local only" in bacteria[0]


def test_datasets_sample_writes_csvs(tmp_path: Path) -> None:
    out = tmp_path / "samples"
    result = runner.invoke(app, ["datasets", "sample", "--out", str(out)])
    assert result.exit_code == 0
    assert sorted(p.name for p in out.glob("*.csv")) == [
        "athletes.csv",
        "bacteria.csv",
        "election.csv",
        "gapminder.csv",
        "murders.csv",
        "tb.csv",
    ]


def test_datasets_fetch_offline_fails() -> None:
    result = runner.invoke(app, ["datasets", "fetch", "--name", "murders"], env={"VIZLESSONS_OFFLINE": "1"})
    assert result.exit_code == 1
    assert "offline" in result.output


def test_render_one_lesson(tmp_path: Path, sample_dir: Path) -> None:
    out = tmp_path / "out"
    result = runner.invoke(
        app,
        ["render", "--lesson", "tidy_data", "--data-dir", str(sample_dir), "--out", str(out), "--offline", "--dpi", "40"],
    )
    assert result.exit_code == 0, result.output
    assert "Lesson: tidy_data" in result.output
    assert result.output.count("figure:") == 3
    assert (out / "tidy_data" / "manifest.json").exists()
    assert (out / "tidy_data" / "lesson.md").exists()


@pytest.mark.parametrize("args", [[], ["--lesson", "tidy_data", "--all"]])
def test_render_needs_exactly_one_target(args: list[str]) -> None:
    result = runner.invoke(app, ["render", *args])
    assert result.exit_code == 1
    assert "exactly one" in result.output


def test_render_unknown_lesson(tmp_path: Path) -> None:
    result = runner.invoke(app, ["render", "--lesson", "nope", "--out", str(tmp_path)])
    assert result.exit_code == 1
    assert "Unknown lesson" in result.output


def test_render_offline_without_data(tmp_path: Path) -> None:
    result = runner.invoke(app, ["render", "--lesson", "tidy_data", "--out", str(tmp_path), "--offline"])
    assert result.exit_code == 1
    assert "ERROR" in result.output


def test_invalid_environment_is_reported(tmp_path: Path) -> None:
    result = runner.invoke(app, ["render", "--lesson", "tidy_data", "--out", str(tmp_path)], env={"VIZLESSONS_DPI": "x"})
    assert result.exit_code == 1
    assert "ERROR" in result.output
