from __future__ import annotations

import dataclasses
import functools
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pandas as pd
import pytest

from vizlessons.config import load_settings
from vizlessons.datasets import (
    DATASETS,
    DatasetError,
    dataset_record,
    fetch_dataset,
    fingerprint,
    get_dataset_info,
    list_datasets,
    load_dataset,
    load_dataset_with_source,
    resolve_source,
)
from vizlessons.models import SourceKind
from vizlessons.samples import make_sample


def _settings(tmp_path: Path, **kw):
    return load_settings(env={}, cache_dir=tmp_path / "cache", **kw)


class _QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, format, *args):
        pass


@pytest.fixture
def csv_server(sample_dir: Path):
    """Serve the sample CSVs over HTTP on a free local port."""
    handler = functools.partial(_QuietHandler, directory=str(sample_dir))
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.fixture
def murders_url(csv_server: str, monkeypatch) -> str:
    url = f"{csv_server}/murders.csv"
    monkeypatch.setitem(DATASETS, "murders", dataclasses.replace(DATASETS["murders"], url=url))
    return url


def test_catalogue_order_and_lookup() -> None:
    names = [d.name for d in list_datasets()]
    assert names == ["murders", "gapminder", "election", "tb", "bacteria", "athletes"]
    assert get_dataset_info("murders").filename == "murders.csv"
    with pytest.raises(DatasetError):
        get_dataset_info("titanic")


def test_explicit_missing_path_is_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        resolve_source("murders", tmp_path / "nope.csv", _settings(tmp_path))


def test_data_dir_wins_over_cache(tmp_path: Path, sample_dir: Path) -> None:
    settings = _settings(tmp_path, data_dir=sample_dir)
    settings.cache_dir.mkdir(parents=True)
    make_sample("murders").to_csv(settings.cache_dir / "murders.csv", index=False)
    src = resolve_source("murders", settings=settings)
    assert src.kind == SourceKind.DATA_DIR


def test_cache_is_used_when_present(tmp_path: Path) -> None:
    settings = _settings(tmp_path, offline=True)
    settings.cache_dir.mkdir(parents=True)
    make_sample("election").to_csv(settings.cache_dir / "election.csv", index=False)
    df, src = load_dataset_with_source("election", settings=settings)
    assert src.kind == SourceKind.CACHE
    assert len(df) == 51


def test_offline_without_local_copy_fails(tmp_path: Path) -> None:
    with pytest.raises(DatasetError, match="offline"):
        resolve_source("gapminder", settings=_settings(tmp_path, offline=True))


def test_dataset_without_url_needs_local_copy(tmp_path: Path) -> None:
    with pytest.raises(DatasetError, match="no public URL"):
        resolve_source("bacteria", settings=_settings(tmp_path))
    with pytest.raises(DatasetError):
        fetch_dataset("bacteria", settings=_settings(tmp_path))


def test_columns_are_normalized(tmp_path: Path) -> None:
    raw = make_sample("athletes").rename(columns={"body_fat": "pcBfat", "ht": "Ht"})
    raw.insert(0, "rownames", range(1, len(raw) + 1))
    path = tmp_path / "ais.csv"
    raw.to_csv(path, index=False)

    df = load_dataset("athletes", path, _settings(tmp_path))
    assert "body_fat" in df.columns
    assert "ht" in df.columns
    assert "rownames" not in df.columns


def test_missing_required_columns_are_reported(tmp_path: Path) -> None:
    path = tmp_path / "murders.csv"
    make_sample("murders").drop(columns=["total"]).to_csv(path, index=False)
    with pytest.raises(DatasetError, match="total"):
        load_dataset("murders", path, _settings(tmp_path))


def test_wide_dataset_needs_value_columns(tmp_path: Path) -> None:
    path = tmp_path / "tb.csv"
    pd.DataFrame({"country": ["A"], "year": [2000]}).to_csv(path, index=False)
    with pytest.raises(DatasetError, match="value column"):
        load_dataset("tb", path, _settings(tmp_path))


def test_record_fingerprints_local_files(tmp_path: Path, sample_dir: Path) -> None:
    df, src = load_dataset_with_source("murders", settings=_settings(tmp_path, data_dir=sample_dir))
    rec = dataset_record("murders", df, src)
    assert rec.source_kind == SourceKind.DATA_DIR
    assert rec.rows == 51
    assert rec.sha256 is not None and len(rec.sha256) == 64


def test_each_load_returns_a_fresh_frame(tmp_path: Path, sample_dir: Path) -> None:
    settings = _settings(tmp_path, data_dir=sample_dir)
    first = load_dataset("murders", settings=settings)
    first["total"] = 0
    second = load_dataset("murders", settings=settings)
    assert second["total"].sum() > 0


def test_gapminder_requires_gdp(tmp_path: Path) -> None:
    path = tmp_path / "gapminder.csv"
    make_sample("gapminder").drop(columns=["gdp"]).to_csv(path, index=False)
    with pytest.raises(DatasetError, match="gdp"):
        load_dataset("gapminder", path, _settings(tmp_path))


def test_catalogue_url_fills_cache_for_next_load(tmp_path: Path, murders_url: str) -> None:
    settings = _settings(tmp_path)
    df, src = load_dataset_with_source("murders", settings=settings)
    assert src.kind == SourceKind.URL
    assert src.location == murders_url
    assert len(df) == 51

    cached = settings.cache_dir / "murders.csv"
    assert src.cached == str(cached)
    rec = dataset_record("murders", df, src)
    assert rec.source_kind == SourceKind.URL
    assert rec.sha256 == fingerprint(cached)

    _, again = load_dataset_with_source("murders", settings=settings)
    assert again.kind == SourceKind.CACHE


def test_other_url_does_not_replace_canonical_cache(tmp_path: Path, sample_dir: Path, murders_url: str) -> None:
    settings = _settings(tmp_path)
    assert len(load_dataset("murders", settings=settings)) == 51

    make_sample("murders").head(3).to_csv(sample_dir / "three_states.csv", index=False)
    other = murders_url.replace("murders.csv", "three_states.csv")
    df, src = load_dataset_with_source("murders", other, settings)
    assert len(df) == 3
    assert src.cached is not None
    assert Path(src.cached) != settings.cache_dir / "murders.csv"

    df, src = load_dataset_with_source("murders", settings=settings)
    assert src.kind == SourceKind.CACHE
    assert len(df) == 51


def test_invalid_download_is_not_cached(tmp_path: Path, sample_dir: Path, csv_server: str) -> None:
    settings = _settings(tmp_path)
    make_sample("murders").drop(columns=["total"]).to_csv(sample_dir / "broken.csv", index=False)
    with pytest.raises(DatasetError, match="total"):
        load_dataset("murders", f"{csv_server}/broken.csv", settings)
    assert not list(settings.cache_dir.glob("murders*.csv"))


def test_fetch_downloads_then_short_circuits(tmp_path: Path, murders_url: str) -> None:
    settings = _settings(tmp_path)
    out = fetch_dataset("murders", settings=settings)
    assert out == settings.cache_dir / "murders.csv"
    assert len(pd.read_csv(out)) == 51

    out.write_text("state\nstale\n", encoding="utf-8")
    assert fetch_dataset("murders", settings=settings) == out
    assert out.read_text(encoding="utf-8") == "state\nstale\n"

    fetch_dataset("murders", settings=settings, force=True)
    assert len(pd.read_csv(out)) == 51


def test_fetch_refuses_offline(tmp_path: Path, murders_url: str) -> None:
    with pytest.raises(DatasetError, match="offline"):
        fetch_dataset("murders", settings=_settings(tmp_path, offline=True))
