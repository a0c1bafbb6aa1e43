from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure
from plotnine import aes, geom_point, ggplot, labs

from vizlessons.plots import draw_plot, panel_tags, panel_title, plot_kind, plot_title, save_plot


@pytest.fixture
def scatter(small_frame) -> ggplot:
    return ggplot(small_frame, aes(x="x", y="y", color="group")) + geom_point() + labs(title="Scatter")


def test_panel_tags_styles() -> None:
    assert panel_tags(3) == ["A", "B", "C"]
    assert panel_tags(2, "a") == ["a", "b"]
    assert panel_tags(3, "1") == ["1", "2", "3"]
    assert panel_tags(2, None) == ["", ""]
    assert panel_tags(28)[25:] == ["Z", "AA", "AB"]
    with pytest.raises(ValueError):
        panel_tags(2, "i")


def test_panel_title() -> None:
    assert panel_title("B", "Height and weight") == "B. Height and weight"
    assert panel_title("", "Height and weight") == "Height and weight"


def test_title_and_kind(scatter: ggplot) -> None:
    assert plot_title(scatter) == "Scatter"
    assert plot_kind(scatter) == "chart"
    both = scatter | scatter
    assert plot_title(both) is None
    assert plot_kind(both) == "composition"
    assert plot_kind(scatter / both) == "composition"


def test_draw_plot_returns_figure(scatter: ggplot) -> None:
    fig = draw_plot(scatter)
    assert isinstance(fig, Figure)
    plt.close(fig)


@pytest.mark.parametrize("composed", [False, True])
def test_save_plot_writes_png(scatter: ggplot, tmp_path: Path, composed: bool) -> None:
    plot = (scatter | scatter) if composed else scatter
    out = save_plot(plot, tmp_path / "nested" / "figure.png", dpi=60)
    assert out.read_bytes()[:4] == b"\x89PNG"
