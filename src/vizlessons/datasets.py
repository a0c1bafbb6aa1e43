from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd

from .config import Settings, load_settings
from .models import DatasetRecord, DatasetSource, SourceKind
from .paths import cache_path
from .utils import sha256_file, snake_case

logger = logging.getLogger(__name__)

_RDATASETS = "https://vincentarelbundock.github.io/Rdatasets/csv"

# Index columns written by R's write.csv / pandas' to_csv(index=True).
_INDEX_COLUMNS = {"rownames", "unnamed_0", ""}


class DatasetError(ValueError):
    """Raised when a dataset is unknown, unreachable or has the wrong shape."""


@dataclass(frozen=True)
class DatasetInfo:
    """
    Catalogue entry for one static tabular input.

    url is None for datasets without a stable public CSV; those must come from
    VIZLESSONS_DATA_DIR, an explicit path or `vizlessons datasets sample`.
    """
    name: str
    title: str
    description: str
    filename: str
    required_columns: tuple[str, ...]
    url: Optional[str] = None
    sep: str = ","
    renames: dict[str, str] = field(default_factory=dict)
    min_extra_columns: int = 0


DATASETS: dict[str, DatasetInfo] = {
    info.name: info
    for info in (
        DatasetInfo(
            name="murders",
            title="US gun murders by state (2010)",
            description="Population, region and total gun murders for the 50 states and DC.",
            filename="murders.csv",
            required_columns=("state", "abb", "region", "population", "total"),
            url=f"{_RDATASETS}/dslabs/murders.csv",
        ),
        DatasetInfo(
            name="gapminder",
            title="Gapminder country panel",
            description="Life expectancy, fertility, population and GDP per country and year.",
            filename="gapminder.csv",
            required_columns=("country", "year", "continent", "life_expectancy", "fertility", "population", "gdp"),
            url=f"{_RDATASETS}/dslabs/gapminder.csv",
        ),
        DatasetInfo(
            name="election",
            title="US presidential election 2016",
            description="Electoral votes and popular-vote percentages per state.",
            filename="election.csv",
            required_columns=("state", "electoral_votes", "clinton", "trump", "others"),
            url=f"{_RDATASETS}/dslabs/results_us_election_2016.csv",
        ),
        DatasetInfo(
            name="tb",
            title="WHO tuberculosis case counts",
            description="New TB cases by country and year, one wide column per diagnosis/sex/age group.",
            filename="tb.csv",
            required_columns=("country", "year"),
            url=f"{_RDATASETS}/tidyr/who.csv",
            min_extra_columns=1,
        ),
        DatasetInfo(
            name="bacteria",
            title="Gut bacterial abundance time series",
            description="Relative abundance of bacterial taxa per subject and sampling day.",
            filename="bacteria.csv",
            required_columns=("subject", "day"),
            min_extra_columns=1,
        ),
        DatasetInfo(
            name="athletes",
            title="Australian Institute of Sport athletes",
            description="Blood measurements and body composition of elite athletes by sport and sex.",
            filename="athletes.csv",
            required_columns=("sex", "sport", "ht", "wt", "bmi", "hc", "body_fat"),
            url=f"{_RDATASETS}/DAAG/ais.csv",
            renames={"pc_bfat": "body_fat"},
        ),
    )
}


def list_datasets() -> list[DatasetInfo]:
    return list(DATASETS.values())


def get_dataset_info(name: str) -> DatasetInfo:
    try:
        return DATASETS[name]
    except KeyError:
        raise DatasetError(f"Unknown dataset '{name}'. Available: {sorted(DATASETS)}") from None


def resolve_source(name: str, source: Path | str | None = None, settings: Settings | None = None) -> DatasetSource:
    """
    Decide where a dataset is read from.

    Order: explicit source, VIZLESSONS_DATA_DIR, download cache, public URL.
    Offline mode stops before the URL.
    """
    info = get_dataset_info(name)
    settings = settings or load_settings()

    if source is not None:
        text = str(source)
        if text.startswith(("http://", "https://")):
            return DatasetSource(name=name, kind=SourceKind.URL, location=text)
        p = Path(source)
        if not p.exists():
            raise FileNotFoundError(f"Dataset file not found: {p}")
        return DatasetSource(name=name, kind=SourceKind.PATH, location=str(p))

    if settings.data_dir is not None:
        p = settings.data_dir / info.filename
        if p.exists():
            return DatasetSource(name=name, kind=SourceKind.DATA_DIR, location=str(p))

    cached = settings.cache_dir / info.filename
    if cached.exists():
        return DatasetSource(name=name, kind=SourceKind.CACHE, location=str(cached))

    if settings.offline:
        raise DatasetError(
            f"Dataset '{name}' has no local copy and offline mode is on. "
            f"Place {info.filename} in VIZLESSONS_DATA_DIR or run `vizlessons datasets sample`."
        )
    if info.url is None:
        raise DatasetError(
            f"Dataset '{name}' has no public URL. "
            f"Place {info.filename} in VIZLESSONS_DATA_DIR or run `vizlessons datasets sample`."
        )
    return DatasetSource(name=name, kind=SourceKind.URL, location=info.url)


def normalize_columns(df: pd.DataFrame, info: DatasetInfo) -> pd.DataFrame:
    """
    snake_case headers, drop exported index columns and apply catalogue renames.
    """
    df = df.copy()
    df.columns = [snake_case(c) for c in df.columns]
    drop = [c for c in df.columns if c in _INDEX_COLUMNS]
    if drop:
        df = df.drop(columns=drop)
    if info.renames:
        df = df.rename(columns=info.renames)
    return df


def validate_columns(df: pd.DataFrame, info: DatasetInfo) -> None:
    missing = [c for c in info.required_columns if c not in df.columns]
    if missing:
        raise DatasetError(f"Dataset '{info.name}' is missing required columns: {missing}")
    extra = [c for c in df.columns if c not in info.required_columns]
    if len(extra) < info.min_extra_columns:
        raise DatasetError(
            f"Dataset '{info.name}' needs at least {info.min_extra_columns} value column(s) "
            f"besides {list(info.required_columns)}."
        )


def _read(src: DatasetSource, info: DatasetInfo) -> pd.DataFrame:
    try:
        return pd.read_csv(src.location, sep=info.sep)
    except FileNotFoundError:
        raise
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DatasetError(f"Could not read dataset '{info.name}' from {src.location}: {e}") from e


def url_cache_path(info: DatasetInfo, url: str, settings: Settings) -> Path:
    if url == info.url:
        return cache_path(settings, info.filename)
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[:12]
    return cache_path(settings, f"{Path(info.filename).stem}-{digest}{Path(info.filename).suffix}")


def load_dataset_with_source(
    name: str,
    source: Path | str | None = None,
    settings: Settings | None = None,
) -> tuple[pd.DataFrame, DatasetSource]:
    """
    Load a dataset and report where it came from.

    URL reads are written to the cache exactly as fetched. The catalogue URL
    fills the canonical cache file that resolve_source checks, so the next load
    is local; any other URL gets its own file keyed by the URL and never
    replaces the canonical copy.
    """
    info = get_dataset_info(name)
    settings = settings or load_settings()
    src = resolve_source(name, source, settings)
    logger.info("Loading dataset %s from %s (%s)", name, src.location, src.kind.value)

    raw = _read(src, info)
    df = normalize_columns(raw, info)
    validate_columns(df, info)

    if src.kind == SourceKind.URL:
        cached = url_cache_path(info, src.location, settings)
        raw.to_csv(cached, index=False, sep=info.sep)
        src = src.model_copy(update={"cached": str(cached)})
        logger.debug("Cached %s at %s", name, cached)
    return df, src


def load_dataset(name: str, source: Path | str | None = None, settings: Settings | None = None) -> pd.DataFrame:
    df, _ = load_dataset_with_source(name, source, settings)
    return df


def fetch_dataset(name: str, settings: Settings | None = None, force: bool = False) -> Path:
    """
    Download a dataset into the cache and return the cached path.
    """
    info = get_dataset_info(name)
    settings = settings or load_settings()
    cached = settings.cache_dir / info.filename
    if cached.exists() and not force:
        return cached
    if info.url is None:
        raise DatasetError(f"Dataset '{name}' has no public URL to fetch.")
    if settings.offline:
        raise DatasetError(f"Cannot fetch '{name}' in offline mode.")

    raw = _read(DatasetSource(name=name, kind=SourceKind.URL, location=info.url), info)
    validate_columns(normalize_columns(raw, info), info)
    out = cache_path(settings, info.filename)
    raw.to_csv(out, index=False, sep=info.sep)
    logger.info("Fetched %s (%d rows) to %s", name, len(raw), out)
    return out


def fingerprint(path: Path) -> str:
    return sha256_file(path)


def dataset_record(name: str, df: pd.DataFrame, src: DatasetSource) -> DatasetRecord:
    sha = None
    if src.kind != SourceKind.URL:
        sha = fingerprint(Path(src.location))
    elif src.cached is not None:
        sha = fingerprint(Path(src.cached))
    return DatasetRecord(
        name=name,
        source_kind=src.kind,
        location=src.location,
        rows=int(len(df)),
        columns=[str(c) for c in df.columns],
        sha256=sha,
    )
