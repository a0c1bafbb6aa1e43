"""Deterministic synthetic stand-ins for the lesson datasets.

The frames share the column layout of the real inputs so every lesson renders
offline. Values are plausible, not real: do not draw conclusions from them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import numpy as np
import pandas as pd

from .datasets import get_dataset_info

logger = logging.getLogger(__name__)

STATES: list[tuple[str, str, str, int]] = [
    # (state, abbreviation, region, electoral votes)
    ("Alabama", "AL", "South", 9), ("Alaska", "AK", "West", 3), ("Arizona", "AZ", "West", 11),
    ("Arkansas", "AR", "South", 6), ("California", "CA", "West", 55), ("Colorado", "CO", "West", 9),
    ("Connecticut", "CT", "Northeast", 7), ("Delaware", "DE", "South", 3),
    ("District of Columbia", "DC", "South", 3), ("Florida", "FL", "South", 29),
    ("Georgia", "GA", "South", 16), ("Hawaii", "HI", "West", 4), ("Idaho", "ID", "West", 4),
    ("Illinois", "IL", "North Central", 20), ("Indiana", "IN", "North Central", 11),
    ("Iowa", "IA", "North Central", 6), ("Kansas", "KS", "North Central", 6),
    ("Kentucky", "KY", "South", 8), ("Louisiana", "LA", "South", 8), ("Maine", "ME", "Northeast", 4),
    ("Maryland", "MD", "South", 10), ("Massachusetts", "MA", "Northeast", 11),
    ("Michigan", "MI", "North Central", 16), ("Minnesota", "MN", "North Central", 10),
    ("Mississippi", "MS", "South", 6), ("Missouri", "MO", "North Central", 10),
    ("Montana", "MT", "West", 3), ("Nebraska", "NE", "North Central", 5), ("Nevada", "NV", "West", 6),
    ("New Hampshire", "NH", "Northeast", 4), ("New Jersey", "NJ", "Northeast", 14),
    ("New Mexico", "NM", "West", 5), ("New York", "NY", "Northeast", 29),
    ("North Carolina", "NC", "South", 15), ("North Dakota", "ND", "North Central", 3),
    ("Ohio", "OH", "North Central", 18), ("Oklahoma", "OK", "South", 7), ("Oregon", "OR", "West", 7),
    ("Pennsylvania", "PA", "Northeast", 20), ("Rhode Island", "RI", "Northeast", 4),
    ("South Carolina", "SC", "South", 9), ("South Dakota", "SD", "North Central", 3),
    ("Tennessee", "TN", "South", 11), ("Texas", "TX", "South", 38), ("Utah", "UT", "West", 6),
    ("Vermont", "VT", "Northeast", 3), ("Virginia", "VA", "South", 13), ("Washington", "WA", "West", 12),
    ("West Virginia", "WV", "South", 5), ("Wisconsin", "WI", "North Central", 10),
    ("Wyoming", "WY", "West", 3),
]

COUNTRIES: dict[str, list[str]] = {
    "Africa": ["Kenya", "Nigeria", "Ghana", "Zambia"],
    "Americas": ["Brazil", "Canada", "Mexico", "Peru"],
    "Asia": ["India", "Japan", "Vietnam", "Indonesia"],
    "Europe": ["France", "Poland", "Sweden", "Spain"],
    "Oceania": ["Australia", "New Zealand", "Fiji", "Samoa"],
}

# Starting life expectancy / fertility in 1960 by continent.
_CONTINENT_START = {
    "Africa": (42.0, 6.7),
    "Americas": (58.0, 5.5),
    "Asia": (48.0, 5.9),
    "Europe": (68.0, 2.6),
    "Oceania": (60.0, 4.8),
}

TB_DIAGNOSES = ("sp", "sn", "ep", "rel")
TB_AGES = ("014", "1524", "2534", "3544", "4554", "5564", "65")
TAXA = ("bacteroides", "prevotella", "ruminococcus", "bifidobacterium", "akkermansia")
SPORTS = ("B_Ball", "Field", "Gym", "Netball", "Row", "Swim", "T_400m", "T_Sprnt", "Tennis", "W_Polo")


def sample_murders(seed: int = 1) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    rate_by_region = {"South": 4.0, "West": 2.2, "North Central": 2.3, "Northeast": 2.0}
    rows = []
    for state, abb, region, _ in STATES:
        population = int(rng.lognormal(mean=15.0, sigma=0.9))
        rate = max(0.3, rng.normal(rate_by_region[region], 0.9))
        rows.append(
            {
                "state": state,
                "abb": abb,
                "region": region,
                "population": population,
                "total": max(1, int(round(population * rate / 1e5))),
            }
        )
    return pd.DataFrame(rows)


def sample_gapminder(seed: int = 2, years: range = range(1960, 2016)) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    rows = []
    for continent, countries in COUNTRIES.items():
        life0, fert0 = _CONTINENT_START[continent]
        for country in countries:
            life_offset = rng.normal(0, 3)
            fert_offset = rng.normal(0, 0.4)
            pop0 = rng.lognormal(mean=16.0, sigma=1.2)
            gdp0 = rng.lognormal(mean=25.0, sigma=1.0)
            for i, year in enumerate(years):
                t = i / max(1, len(years) - 1)
                life = life0 + life_offset + (82 - life0) * 0.6 * t + rng.normal(0, 0.4)
                fert = max(1.1, fert0 + fert_offset - (fert0 - 1.6) * 0.7 * t + rng.normal(0, 0.1))
                rows.append(
                    {
                        "country": country,
                        "year": year,
                        "infant_mortality": round(max(2.0, 160 * (1 - t) * (80 - life) / 40 + rng.normal(0, 2)), 1),
                        "life_expectancy": round(min(life, 84.0), 2),
                        "fertility": round(fert, 2),
                        "population": int(pop0 * (1.018 ** i)),
                        "gdp": float(gdp0 * (1.03 ** i)),
                        "continent": continent,
                        "region": continent,
                    }
                )
    return pd.DataFrame(rows)


def sample_election(seed: int = 3) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    lean = {"South": -8.0, "West": 4.0, "North Central": -2.0, "Northeast": 12.0}
    rows = []
    for state, _, region, ev in STATES:
        others = round(float(rng.uniform(2.0, 8.0)), 1)
        margin = rng.normal(lean[region], 10.0)
        clinton = round((100 - others + margin) / 2, 1)
        trump = round(100 - others - clinton, 1)
        rows.append({"state": state, "electoral_votes": ev, "clinton": clinton, "trump": trump, "others": others})
    return pd.DataFrame(rows)


def sample_tb(seed: int = 4, years: range = range(1995, 2014)) -> pd.DataFrame:
    """
    WHO layout: one column per diagnosis/sex/age, e.g. new_sp_m014. Relapse
    columns keep the inconsistent `newrel_` spelling of the real data.
    """
    rng = np.random.default_rng(seed)
    countries = [("Afghanistan", "AF", "AFG"), ("Brazil", "BR", "BRA"), ("China", "CN", "CHN")]
    value_cols = []
    for dx in TB_DIAGNOSES:
        prefix = "newrel_" if dx == "rel" else f"new_{dx}_"
        for sex in ("m", "f"):
            for age in TB_AGES:
                value_cols.append(f"{prefix}{sex}{age}")

    rows = []
    for country, iso2, iso3 in countries:
        scale = rng.uniform(50, 2000)
        for year in years:
            row: dict[str, object] = {"country": country, "iso2": iso2, "iso3": iso3, "year": year}
            for col in value_cols:
                # Relapse reporting only starts in 2013, as in the WHO data.
                if col.startswith("newrel") and year < 2013:
                    row[col] = np.nan
                elif rng.random() < 0.05:
                    row[col] = np.nan
                else:
                    row[col] = int(rng.poisson(scale * (1 + 0.02 * (year - years.start))))
            rows.append(row)
    return pd.DataFrame(rows)


def sample_bacteria(seed: int = 5, days: range = range(0, 31, 3)) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    rows = []
    for s in range(1, 5):
        base = rng.dirichlet(np.ones(len(TAXA)) * 2)
        for day in days:
            drift = rng.normal(0, 0.15, len(TAXA))
            weights = np.clip(base * np.exp(drift), 1e-4, None)
            weights = weights / weights.sum()
            row: dict[str, object] = {"subject": f"S{s}", "day": day}
            row.update({taxon: round(float(w), 4) for taxon, w in zip(TAXA, weights)})
            rows.append(row)
    return pd.DataFrame(rows)


def sample_athletes(seed: int = 6, n: int = 202) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    rows = []
    for _ in range(n):
        sex = "f" if rng.random() < 0.5 else "m"
        sport = SPORTS[int(rng.integers(0, len(SPORTS)))]
        ht = rng.normal(170 if sex == "f" else 185, 7)
        if sport in ("B_Ball", "Row", "W_Polo"):
            ht += 6
        if sport == "Gym":
            ht -= 15
        bmi = rng.normal(21.5 if sex == "f" else 23.5, 1.8)
        wt = bmi * (ht / 100) ** 2
        rows.append(
            {
                "rcc": round(float(rng.normal(4.4 if sex == "f" else 5.0, 0.3)), 2),
                "wcc": round(float(rng.normal(7.0, 1.8)), 1),
                "hc": round(float(rng.normal(40.5 if sex == "f" else 45.5, 2.5)), 1),
                "hg": round(float(rng.normal(13.6 if sex == "f" else 15.5, 1.0)), 1),
                "ferr": int(rng.lognormal(4.2, 0.5)),
                "bmi": round(float(bmi), 2),
                "ssf": round(float(rng.normal(80 if sex == "f" else 50, 20)), 1),
                "body_fat": round(float(rng.normal(17.8 if sex == "f" else 9.3, 3.0)), 2),
                "lbm": round(float(wt * (1 - 0.14)), 2),
                "ht": round(float(ht), 1),
                "wt": round(float(wt), 1),
                "sex": sex,
                "sport": sport,
            }
        )
    return pd.DataFrame(rows)


SAMPLE_BUILDERS: dict[str, Callable[[], pd.DataFrame]] = {
    "murders": sample_murders,
    "gapminder": sample_gapminder,
    "election": sample_election,
    "tb": sample_tb,
    "bacteria": sample_bacteria,
    "athletes": sample_athletes,
}


def make_sample(name: str) -> pd.DataFrame:
    info = get_dataset_info(name)
    return SAMPLE_BUILDERS[info.name]()


def write_samples(out_dir: Path, names: list[str] | None = None) -> list[Path]:
    """
    Write synthetic CSVs named like the catalogue files, ready to be used as
    VIZLESSONS_DATA_DIR.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name in names or list(SAMPLE_BUILDERS):
        info = get_dataset_info(name)
        path = out_dir / info.filename
        make_sample(name).to_csv(path, index=False, sep=info.sep)
        logger.info("Wrote sample %s to %s", name, path)
        written.append(path)
    return written
