from __future__ import annotations

import matplotlib.pyplot as plt
import pandas as pd
import pytest
from plotnine import geom_abline, geom_point, geom_text, ggplot, scale_x_log10
from pydantic import ValidationError

from vizlessons.dashboard import (
    ExplorerState,
    continent_choices,
    continent_summary,
    default_state,
    explorer_chart,
    filter_gapminder,
    filter_regions,
    murder_rates,
    murders_chart,
    national_rate,
    region_rate_chart,
    region_summary,
    with_gdp_per_capita,
    year_choices,
)
from vizlessons.plots import draw_plot, plot_title
from vizlessons.samples import make_sample


@pytest.fixture(scope="module")
def gapminder() -> pd.DataFrame:
    return make_sample("gapminder")


@pytest.fixture
def tiny_murders() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "state": ["A", "B", "C"],
            "abb": ["AA", "BB", "CC"],
            "region": ["South", "West", "South"],
            "population": [1_000_000, 2_000_000, 1_000_000],
            "total": [50, 20, 30],
        }
    )


def test_controls_come_from_the_data(gapminder: pd.DataFrame) -> None:
    assert year_choices(gapminder)[0] == 1960
    assert year_choices(gapminder)[-1] == 2015
    assert continent_choices(gapminder) == ["Africa", "Americas", "Asia", "Europe", "Oceania"]
    state = default_state(gapminder)
    assert state.year == 2015
    assert state.continents == continent_choices(gapminder)


def test_year_choices_skip_incomplete_years() -> None:
    df = pd.DataFrame({"year": [2000, 2001], "fertility": [2.0, None], "life_expectancy": [70.0, 71.0]})
    assert year_choices(df) == [2000]


def test_filter_by_year_and_continent(gapminder: pd.DataFrame) -> None:
    asia = filter_gapminder(gapminder, 2000, ["Asia"])
    assert set(asia["continent"]) == {"Asia"}
    assert set(asia["year"]) == {2000}
    assert "gdp_per_capita" in asia.columns

    everyone = filter_gapminder(gapminder, 2000, [])
    assert len(everyone) == gapminder["country"].nunique()


def test_gdp_per_capita_is_derived_once(gapminder: pd.DataFrame) -> None:
    out = with_gdp_per_capita(gapminder)
    row = out.iloc[0]
    assert row["gdp_per_capita"] == pytest.approx(row["gdp"] / row["population"])
    assert with_gdp_per_capita(out) is out


def test_continent_summary(gapminder: pd.DataFrame) -> None:
    summary = continent_summary(filter_gapminder(gapminder, 1990), "life_expectancy")
    assert list(summary.columns) == ["continent", "countries", "mean", "median"]
    assert summary["countries"].tolist() == [4] * 5
    with pytest.raises(KeyError):
        continent_summary(gapminder, "happiness")
    with pytest.raises(ValueError):
        continent_summary(gapminder, "fertility", stats=("mode",))


def test_explorer_state_rejects_unknown_metrics() -> None:
    with pytest.raises(ValidationError):
        ExplorerState(year=2000, x="happiness")


def test_explorer_chart_follows_controls(gapminder: pd.DataFrame) -> None:
    state = ExplorerState(year=2000, continents=["Europe", "Asia"], x="gdp_per_capita", log_x=True)
    chart = explorer_chart(gapminder, state)
    assert isinstance(chart, ggplot)
    assert any(isinstance(s, scale_x_log10) for s in chart.scales)
    assert chart.mapping["size"] == "population"
    assert set(chart.data["continent"]) == {"Europe", "Asia"}
    assert "2000" in plot_title(chart)
    fig = draw_plot(chart)
    assert fig.axes
    plt.close(fig)

    plain = explorer_chart(gapminder, ExplorerState(year=2000, size_by_population=False))
    assert "size" not in plain.mapping
    assert not any(isinstance(s, scale_x_log10) for s in plain.scales)


def test_explorer_chart_needs_the_plotted_metric(gapminder: pd.DataFrame) -> None:
    no_gdp = gapminder.drop(columns=["gdp"])
    state = ExplorerState(year=2000, x="gdp_per_capita", log_x=True)
    with pytest.raises(KeyError, match="gdp_per_capita"):
        explorer_chart(no_gdp, state)


def test_murder_rates_sorted_highest_first(tiny_murders: pd.DataFrame) -> None:
    rates = murder_rates(tiny_murders)
    assert rates["state"].tolist() == ["A", "C", "B"]
    assert rates["rate"].tolist() == pytest.approx([5.0, 3.0, 1.0])
    assert rates["population_millions"].tolist() == pytest.approx([1.0, 1.0, 2.0])


def test_national_rate_and_region_summary(tiny_murders: pd.DataFrame) -> None:
    assert national_rate(tiny_murders) == pytest.approx(25.0)
    summary = region_summary(tiny_murders)
    assert summary["region"].tolist() == ["South", "West"]
    assert summary.loc[0, "states"] == 2
    assert summary.loc[0, "rate"] == pytest.approx(4.0)


def test_murders_chart_reference_line_and_regions(tiny_murders: pd.DataFrame) -> None:
    chart = murders_chart(tiny_murders, regions=["South"])
    assert isinstance(chart.layers[0].geom, geom_abline)
    assert set(chart.data["region"]) == {"South"}
    assert isinstance(chart.layers[-1].geom, geom_text)
    assert isinstance(murders_chart(tiny_murders, labels=False).layers[-1].geom, geom_point)
    fig = draw_plot(chart)
    plt.close(fig)


def test_filter_regions_none_keeps_all_and_empty_keeps_none(tiny_murders: pd.DataFrame) -> None:
    assert filter_regions(tiny_murders, None) is tiny_murders
    assert filter_regions(tiny_murders, []).empty
    assert filter_regions(tiny_murders, ["West"])["state"].tolist() == ["B"]


def test_region_boxes_ordered_by_median_rate(tiny_murders: pd.DataFrame) -> None:
    chart = region_rate_chart(tiny_murders)
    assert list(chart.data["region"].cat.categories) == ["West", "South"]
