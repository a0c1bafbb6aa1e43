"""Drawing and saving lesson figures.

Figures are plotnine plots: a ``ggplot`` or a composition built with ``|``
(side by side) and ``/`` (stacked). plotnine owns the grammar, faceting and
layout; this module only turns a finished plot into a PNG and labels the
panels of compound figures.
"""

from __future__ import annotations

import logging
import string
from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from plotnine import ggplot
from plotnine.composition import Compose

logger = logging.getLogger(__name__)

Plot = Union[ggplot, Compose]

TAG_STYLES = ("A", "a", "1")


def is_composition(plot: Plot) -> bool:
    return isinstance(plot, Compose)


def plot_kind(plot: Plot) -> str:
    return "composition" if is_composition(plot) else "chart"


def plot_title(plot: Plot) -> Optional[str]:
    """Title set with labs(); compositions carry none of their own."""
    if is_composition(plot):
        return None
    return getattr(plot.labels, "title", None)


def panel_tags(n: int, style: Optional[str] = "A") -> list[str]:
    """Tags for n panels: A..Z then AA, AB...; a..z; 1..n; or blanks."""
    if style is None:
        return [""] * n
    if style == "1":
        return [str(i + 1) for i in range(n)]
    if style not in ("A", "a"):
        raise ValueError(f"tag style must be one of {list(TAG_STYLES)}")
    letters = string.ascii_uppercase if style == "A" else string.ascii_lowercase
    tags = []
    for i in range(n):
        tag = ""
        k = i
        while True:
            tag = letters[k % 26] + tag
            k = k // 26 - 1
            if k < 0:
                break
        tags.append(tag)
    return tags


def panel_title(tag: str, title: str) -> str:
    return f"{tag}. {title}" if tag else title


def draw_plot(plot: Plot) -> Figure:
    """Draw with plotnine; the caller owns (and should close) the figure."""
    return plot.draw()


def save_plot(plot: Plot, path: Path, dpi: int = 120) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig = draw_plot(plot)
    try:
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
    finally:
        plt.close(fig)
    logger.info("Wrote figure %s", path)
    return path
