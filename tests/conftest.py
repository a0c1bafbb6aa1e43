from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from vizlessons.config import load_settings
from vizlessons.samples import write_samples


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    out = tmp_path / "data"
    write_samples(out)
    return out


@pytest.fixture
def offline_settings(tmp_path: Path, sample_dir: Path):
    return load_settings(
        env={},
        output_dir=tmp_path / "out",
        data_dir=sample_dir,
        cache_dir=tmp_path / "cache",
        offline=True,
        dpi=40,
    )


@pytest.fixture
def small_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "x": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
            "y": [2.0, 4.0, 5.0, 4.0, 6.0, 7.0],
            "group": ["a", "a", "b", "b", "c", "c"],
            "label": ["p1", "p2", "p3", "p4", "p5", "p6"],
        }
    )
