# viewer_core/plotting.py
from __future__ import annotations
import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from matplotlib.figure import Figure

from viewer_core.errors import MSG_INVALID_X, MSG_NO_NUMERIC, MSG_RANGE_TOO_WIDE, PlotError
from viewer_core.selection import PlotKind, PlotRequest
from viewer_core.table_ops import ResultTable

logger = logging.getLogger("plotting")

UNIT_SEP = "__"
MAX_BINS = 1000


# ---------- binning ----------
def quantile(values: Sequence[float], q: float) -> float:
    """Linear interpolation between order statistics at rank q*(n-1)."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.quantile(arr, q))


def round_to_nice(value: float) -> float:
    """Snap a positive width to the closest {1, 2, 5, 10} x 10^k."""
    if not value > 0 or not math.isfinite(value):
        return 1.0
    exponent = math.floor(math.log10(value))
    scale = 10.0 ** exponent
    base = value / scale
    if base < 1.5:
        nice = 1.0
    elif base < 3.0:
        nice = 2.0
    elif base < 7.0:
        nice = 5.0
    else:
        nice = 10.0
    return nice * scale


def fd_bin_width(values: Sequence[float]) -> float:
    """Freedman-Diaconis width 2*IQR/cbrt(n), rounded to a nice value."""
    n = len(values)
    if n == 0:
        return 1.0
    iqr = quantile(values, 0.75) - quantile(values, 0.25)
    width = round_to_nice(2 * iqr / np.cbrt(n))
    return width if width > 0 else 1.0


@dataclass(frozen=True)
class Binning:
    width: float
    count: int
    low: float
    high: float


def fd_bins(values: Sequence[float], fallback: int = 10, max_bins: int = MAX_BINS) -> Binning:
    """FD binning over [min, max]; the width is widened to the next nice
    value until at most `max_bins` bins cover the range."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise PlotError(MSG_NO_NUMERIC)
    width = fd_bin_width(arr)
    low, high = float(arr.min()), float(arr.max())
    span = high - low
    if not math.isfinite(span):
        raise PlotError(MSG_RANGE_TOO_WIDE)
    if span / width > max_bins:
        width = round_to_nice(span / max_bins)
        while span / width > max_bins:
            # 1 -> 2 -> 5 -> 10
            width = round_to_nice(width * 2.5)
        logger.debug("Bin width widened to %g for range %g", width, span)
    count = int(math.floor(span / width))
    if count < 1:
        count = fallback
    return Binning(width=width, count=count, low=low, high=high)


# ---------- labels ----------
def format_axis_label(column: str) -> str:
    """'energy__MeV' -> 'energy (MeV)'; names without a unit pass through."""
    if UNIT_SEP not in column:
        return column
    base, unit = column.split(UNIT_SEP, 1)
    return f"{base.replace('_', ' ')} ({unit})"


def extract_unit(column: str) -> str:
    if UNIT_SEP not in column:
        return ""
    return column.split(UNIT_SEP, 1)[1]


def entries_caption(width: float, unit: str) -> str:
    return f"Entries / {width:g} {unit}" if unit else "Entries"


# ---------- series ----------
def _finite(s: pd.Series) -> pd.Series:
    return s[np.isfinite(s)]


def numeric_series(table: ResultTable, index: int) -> np.ndarray:
    """Column values as floats; empty and non-numeric cells are dropped."""
    s = pd.to_numeric(pd.Series(table.column(index), dtype=object), errors="coerce").dropna()
    return _finite(s.astype(float)).to_numpy()


def paired_series(table: ResultTable, x_index: int, y_index: int) -> Tuple[np.ndarray, np.ndarray]:
    """X and Y from the rows where both cells are numeric."""
    df = pd.DataFrame({
        "x": pd.to_numeric(pd.Series(table.column(x_index), dtype=object), errors="coerce"),
        "y": pd.to_numeric(pd.Series(table.column(y_index), dtype=object), errors="coerce"),
    }).dropna().astype(float)
    df = df[np.isfinite(df["x"]) & np.isfinite(df["y"])]
    return df["x"].to_numpy(), df["y"].to_numpy()


# ---------- chart ----------
@dataclass
class PlotStyle:
    figsize: Tuple[float, float] = (8.0, 6.0)
    cmap: str = "rainbow"
    marker: str = "o"
    color_1d: str = "blue"
    color_2d: str = "red"
    stat_fontsize: float = 8.0


@dataclass
class Chart:
    figure: Figure
    title: str
    x_bins: Optional[Binning] = None
    y_bins: Optional[Binning] = None


def _stat_box(ax, lines: List[str], style: PlotStyle) -> None:
    ax.text(
        0.98, 0.98, "\n".join(lines), transform=ax.transAxes,
        ha="right", va="top", fontsize=style.stat_fontsize, family="monospace",
        bbox=dict(facecolor="none", edgecolor="black", linewidth=0.8),
    )


def _check_index(table: ResultTable, index: Optional[int]) -> bool:
    return index is not None and 0 <= index < len(table.header)


def build_figure(table: ResultTable, request: PlotRequest, style: PlotStyle | None = None) -> Chart:
    style = style or PlotStyle()
    if table is None or not _check_index(table, request.x_index):
        raise PlotError(MSG_INVALID_X)

    xi = request.x_index
    yi = request.y_index if request.dims == 2 and _check_index(table, request.y_index) else None
    x_name = table.header[xi]

    if yi is None:
        x = numeric_series(table, xi)
        y = None
    else:
        x, y = paired_series(table, xi, yi)
    if x.size == 0:
        raise PlotError(MSG_NO_NUMERIC)

    fig = Figure(figsize=style.figsize)
    ax = fig.add_subplot(111)

    if request.kind is PlotKind.HISTOGRAM:
        if y is None:
            chart = _hist_1d(fig, ax, x, x_name, style)
        else:
            chart = _hist_2d(fig, ax, x, y, x_name, table.header[yi], style)
    else:
        if y is None:
            ax.plot(np.arange(x.size), x, linestyle="none", marker=style.marker, color=style.color_1d)
            ax.set_title(x_name); ax.set_xlabel("Index"); ax.set_ylabel(x_name)
            chart = Chart(figure=fig, title=x_name)
        else:
            y_name = table.header[yi]
            ax.plot(x, y, linestyle="none", marker=style.marker, color=style.color_2d)
            ax.set_title("2D Scatter Plot"); ax.set_xlabel(x_name); ax.set_ylabel(y_name)
            chart = Chart(figure=fig, title="2D Scatter Plot")

    fig.tight_layout()
    logger.info("Built %s %dD plot of %r (%d points)",
                request.kind.value, 1 if y is None else 2, x_name, x.size)
    return chart


def _hist_1d(fig, ax, x, x_name, style) -> Chart:
    bins = fd_bins(x)
    label = format_axis_label(x_name)
    ax.hist(x, bins=bins.count, range=(bins.low, bins.high),
            histtype="step", color=style.color_1d)
    ax.set_title(label)
    ax.set_xlabel(label)
    ax.set_ylabel(entries_caption(bins.width, extract_unit(x_name)))
    _stat_box(ax, [
        f"Entries  {x.size}",
        f"Mean     {np.mean(x):.4g}",
        f"Std Dev  {np.std(x):.4g}",
    ], style)
    return Chart(figure=fig, title=label, x_bins=bins)


def _hist_2d(fig, ax, x, y, x_name, y_name, style) -> Chart:
    bx, by = fd_bins(x), fd_bins(y)
    x_label, y_label = format_axis_label(x_name), format_axis_label(y_name)
    title = f"2D Histogram of {x_label} vs {y_label}"
    *_, image = ax.hist2d(
        x, y, bins=[bx.count, by.count],
        range=[[bx.low, bx.high], [by.low, by.high]],
        cmap=style.cmap, cmin=1,
    )
    fig.colorbar(image, ax=ax)
    ax.set_title(title)
    ax.set_xlabel(x_label)
    ax.set_ylabel(y_label)
    _stat_box(ax, [
        f"Entries    {x.size}",
        f"Mean x     {np.mean(x):.4g}",
        f"Mean y     {np.mean(y):.4g}",
        f"Std Dev x  {np.std(x):.4g}",
        f"Std Dev y  {np.std(y):.4g}",
    ], style)
    return Chart(figure=fig, title=title, x_bins=bx, y_bins=by)


# ---------- window pool ----------
class PlotWindowPool:
    """At most `capacity` open plot windows; the oldest is closed first."""

    def __init__(self, capacity: int, factory: Callable[[Figure, str], object]):
        if capacity < 1:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self.factory = factory
        self._windows: deque = deque()

    def open(self, figure: Figure, name: str):
        while len(self._windows) >= self.capacity:
            old = self._windows.popleft()
            logger.info("Closing oldest plot window %s", getattr(old, "name", old))
            old.close()
        win = self.factory(figure, name)
        self._windows.append(win)
        win.show()
        return win

    def discard(self, window) -> None:
        try:
            self._windows.remove(window)
        except ValueError:
            pass

    def close_all(self) -> None:
        while self._windows:
            self._windows.popleft().close()

    @property
    def windows(self) -> list:
        return list(self._windows)

    def __len__(self) -> int:
        return len(self._windows)
