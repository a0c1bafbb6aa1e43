from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd

from vizlessons.datasets import get_dataset_info
from vizlessons.samples import SAMPLE_BUILDERS, write_samples


def main(out_dir: str = "sample_data") -> None:
    """
    Write synthetic copies of every lesson dataset, then print their shapes.

    Use the folder as VIZLESSONS_DATA_DIR to render lessons without network
    access:

        VIZLESSONS_DATA_DIR=sample_data vizlessons render --all
    """
    out = Path(out_dir)
    paths = write_samples(out)

    for name, path in zip(SAMPLE_BUILDERS, paths):
        info = get_dataset_info(name)
        df = pd.read_csv(path, sep=info.sep)
        print(f"{name:<10} {len(df):>6,} rows x {df.shape[1]:>3} cols -> {path.resolve()}")


if __name__ == "__main__":
    main(*sys.argv[1:2])
