from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class SourceKind(str, Enum):
    """
    Where a dataset was read from.

    - PATH: explicit file passed by the caller
    - DATA_DIR: VIZLESSONS_DATA_DIR/<filename>
    - CACHE: previously downloaded copy
    - URL: fetched from the public host (and cached)
    """
    PATH = "path"
    DATA_DIR = "data_dir"
    CACHE = "cache"
    URL = "url"


class DatasetSource(BaseModel):
    """
    A resolved dataset location. `location` is a filesystem path for every
    kind except URL; URL reads also record the `cached` copy they wrote.
    """
    name: str
    kind: SourceKind
    location: str
    cached: Optional[str] = None


class DatasetRecord(BaseModel):
    """
    Dataset provenance written into a lesson manifest.
    """
    name: str
    source_kind: SourceKind
    location: str
    rows: int
    columns: list[str]
    sha256: Optional[str] = None


class FigureRecord(BaseModel):
    """
    One rendered figure. `path` is relative to the lesson directory.
    """
    name: str
    title: str
    path: str
    kind: str = "chart"


class RenderManifest(BaseModel):
    """
    Paths and provenance for a rendered lesson.

    These artifacts are the contract the lesson gallery in the Streamlit app
    reads; it never re-renders anything itself.
    """
    lesson: str
    title: str
    version: str
    lesson_dir: str
    lesson_md: str
    manifest_json: str
    figures: list[FigureRecord] = Field(default_factory=list)
    datasets: list[DatasetRecord] = Field(default_factory=list)
    created_at: str = Field(default_factory=_utcnow)
