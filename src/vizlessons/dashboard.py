"""Logic behind the reactive explorers in the Streamlit app.

Streamlit reruns the whole script whenever a widget changes; everything the
app shows is recomputed from the current control values by the functions
below. Keeping them here (instead of inside the app) makes the recomputation
testable without a browser.
"""

from __future__ import annotations

import math
from typing import Optional

import pandas as pd
from plotnine import (
    aes,
    geom_abline,
    geom_boxplot,
    geom_point,
    geom_text,
    ggplot,
    labs,
    scale_x_log10,
    scale_y_log10,
)
from pydantic import BaseModel, field_validator

GAPMINDER_METRICS: dict[str, str] = {
    "fertility": "Fertility (children per woman)",
    "life_expectancy": "Life expectancy (years)",
    "infant_mortality": "Infant mortality (per 1,000 births)",
    "gdp_per_capita": "GDP per capita (USD)",
    "population": "Population",
}

SUMMARY_STATS = ("mean", "median")


class ExplorerState(BaseModel):
    """Control values of the Gapminder explorer."""
    year: int
    continents: list[str] = []
    x: str = "fertility"
    y: str = "life_expectancy"
    log_x: bool = False
    size_by_population: bool = True

    @field_validator("x", "y")
    @classmethod
    def _known_metric(cls, v: str) -> str:
        if v not in GAPMINDER_METRICS:
            raise ValueError(f"unknown metric '{v}'. Choose from {sorted(GAPMINDER_METRICS)}")
        return v


def with_gdp_per_capita(df: pd.DataFrame) -> pd.DataFrame:
    if "gdp_per_capita" in df.columns or "gdp" not in df.columns:
        return df
    out = df.copy()
    out["gdp_per_capita"] = out["gdp"] / out["population"]
    return out


def year_choices(df: pd.DataFrame, metrics: tuple[str, ...] = ("fertility", "life_expectancy")) -> list[int]:
    """Years with at least one complete observation of the given metrics."""
    cols = [m for m in metrics if m in df.columns]
    complete = df.dropna(subset=cols) if cols else df
    return sorted(int(y) for y in complete["year"].dropna().unique())


def continent_choices(df: pd.DataFrame) -> list[str]:
    return sorted(str(c) for c in df["continent"].dropna().unique())


def default_state(df: pd.DataFrame) -> ExplorerState:
    years = year_choices(df)
    if not years:
        raise ValueError("gapminder data has no complete years")
    return ExplorerState(year=years[-1], continents=continent_choices(df))


def filter_gapminder(df: pd.DataFrame, year: int, continents: Optional[list[str]] = None) -> pd.DataFrame:
    """Rows for one year; an empty or missing continent list keeps them all."""
    out = with_gdp_per_capita(df)
    out = out[out["year"] == year]
    if continents:
        out = out[out["continent"].isin(continents)]
    return out.reset_index(drop=True)


def continent_summary(df: pd.DataFrame, metric: str, stats: tuple[str, ...] = SUMMARY_STATS) -> pd.DataFrame:
    """Per-continent count and summary statistics of one metric."""
    df = with_gdp_per_capita(df)
    if metric not in df.columns:
        raise KeyError(f"metric not in data: {metric}")
    bad = [s for s in stats if s not in SUMMARY_STATS]
    if bad:
        raise ValueError(f"unsupported statistics: {bad}")
    grouped = df.dropna(subset=[metric]).groupby("continent")[metric]
    out = grouped.agg(["count", *stats]).reset_index()
    return out.rename(columns={"count": "countries"}).sort_values("continent").reset_index(drop=True)


def explorer_chart(df: pd.DataFrame, state: ExplorerState) -> ggplot:
    data = filter_gapminder(df, state.year, state.continents)
    missing = [m for m in (state.x, state.y) if m not in data.columns]
    if missing:
        raise KeyError(f"metric not in data: {', '.join(missing)}")
    data = data.dropna(subset=[state.x, state.y])
    if state.size_by_population:
        mapping = aes(x=state.x, y=state.y, color="continent", size="population")
    else:
        mapping = aes(x=state.x, y=state.y, color="continent")
    chart = (
        ggplot(data, mapping)
        + geom_point(alpha=0.75)
        + labs(
            title=f"{GAPMINDER_METRICS[state.y]} vs {GAPMINDER_METRICS[state.x].lower()}, {state.year}",
            x=GAPMINDER_METRICS[state.x],
            y=GAPMINDER_METRICS[state.y],
            color="Continent",
        )
    )
    if state.size_by_population:
        chart = chart + labs(size="Population")
    if state.log_x:
        chart = chart + scale_x_log10()
    return chart


def murder_rates(df: pd.DataFrame) -> pd.DataFrame:
    """Gun murders per 100,000 people, highest first."""
    out = df.copy()
    out["rate"] = out["total"] / out["population"] * 1e5
    out["population_millions"] = out["population"] / 1e6
    return out.sort_values("rate", ascending=False).reset_index(drop=True)


def national_rate(df: pd.DataFrame) -> float:
    """Murders per million people across all states."""
    return float(df["total"].sum() / df["population"].sum() * 1e6)


def region_summary(df: pd.DataFrame) -> pd.DataFrame:
    rates = murder_rates(df)
    out = (
        rates.groupby("region")
        .agg(states=("state", "count"), total=("total", "sum"), population=("population", "sum"), median_rate=("rate", "median"))
        .reset_index()
    )
    out["rate"] = out["total"] / out["population"] * 1e5
    return out.sort_values("rate", ascending=False).reset_index(drop=True)


def filter_regions(df: pd.DataFrame, regions: Optional[list[str]]) -> pd.DataFrame:
    """None keeps every state; an empty selection keeps none."""
    if regions is None:
        return df
    return df[df["region"].isin(regions)].reset_index(drop=True)


def murders_chart(df: pd.DataFrame, regions: Optional[list[str]] = None, labels: bool = True) -> ggplot:
    """Log-log murders vs population with the national-rate reference line."""
    rates = murder_rates(df)
    r = national_rate(rates)
    shown = filter_regions(rates, regions)
    # abline coordinates live on the log10 scale
    chart = (
        ggplot(shown, aes(x="population_millions", y="total", color="region"))
        + geom_abline(intercept=math.log10(r), slope=1, linetype="dashed", color="grey")
        + geom_point(size=3)
        + scale_x_log10()
        + scale_y_log10()
        + labs(
            title="US gun murders in 2010",
            x="Population in millions (log scale)",
            y="Total number of murders (log scale)",
            color="Region",
        )
    )
    if labels:
        chart = chart + geom_text(aes(label="abb"), size=6, nudge_y=0.06, show_legend=False)
    return chart


def region_rate_chart(df: pd.DataFrame) -> ggplot:
    rates = murder_rates(df)
    order = rates.groupby("region")["rate"].median().sort_values().index.tolist()
    rates["region"] = pd.Categorical(rates["region"], categories=order, ordered=True)
    return (
        ggplot(rates, aes(x="region", y="rate"))
        + geom_boxplot()
        + labs(title="Murder rate by region", x="Region", y="Murders per 100,000")
    )
