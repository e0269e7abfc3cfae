"""Render benchmark results as a horizontal bar chart.

The chart is drawn on a fixed pixel canvas (4K by default) with
matplotlib's Agg backend.  Rendering is a pure function of the results,
the :class:`ChartSpec` and the injected date label: it reads no clock
and touches no files, so the same input always yields the same PNG.

Layout, top to bottom::

    date label / "(lower = better)"            (top right)
    npm   install       ████████████ 12.34 s
          install-dev   ██████ 6.20 s
          uninstall     ██ 980 ms
                                               (group spacing)
    pnpm  install       ...

Row ``i`` sits ``i * (bar_height + bar_spacing)`` below the first row,
plus one ``group_spacing`` for every package-manager block above it.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
from matplotlib import image as mpimg
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.figure import Figure
from matplotlib.patches import FancyBboxPatch

from pmbench.bench.results import BenchmarkResult
from pmbench.formatting import format_elapsed, format_status_marker

# Gradient start/end per package manager.
DEFAULT_PALETTE: dict[str, tuple[str, str]] = {
    "npm": ("red", "darkred"),
    "pnpm": ("orange", "darkorange"),
    "yarn": ("blue", "darkblue"),
}
FALLBACK_COLORS: tuple[str, str] = ("grey", "dimgrey")


# ---------------------------------------------------------------------------
# ChartSpec
# ---------------------------------------------------------------------------


@dataclass
class ChartSpec:
    """Fixed geometry and styling of the results chart, in pixels."""

    width: int = 3840
    height: int = 2160
    dpi: int = 100

    margin: int = 50
    top_margin: int = 290  # y of the first bar
    label_width: int = 360  # room for manager/category names left of the bars
    value_label_width: int = 440  # room for the duration right of the longest bar

    bar_height: int = 100
    bar_spacing: int = 50
    group_spacing: int = 40
    corner_radius: int = 20
    canvas_radius: int = 50

    title_font_px: int = 48
    subtitle_font_px: int = 36
    manager_font_px: int = 48
    category_font_px: int = 36
    value_font_px: int = 36
    font_family: str = "DejaVu Sans"

    background_color: str = "white"
    text_color: str = "black"
    palette: dict[str, tuple[str, str]] = field(default_factory=lambda: dict(DEFAULT_PALETTE))

    @property
    def bar_x(self) -> int:
        """Left edge of every bar."""
        return self.margin + self.label_width

    @property
    def max_bar_width(self) -> int:
        """Length of the bar for the slowest result."""
        return self.width - self.bar_x - self.value_label_width - self.margin

    def colors_for(self, package_manager: str) -> tuple[str, str]:
        """Gradient colours for a package manager, independent of the data."""
        return self.palette.get(package_manager, FALLBACK_COLORS)

    def font_size(self, px: int) -> float:
        """Convert a pixel font size to points at this spec's dpi."""
        return px * 72.0 / self.dpi


# ---------------------------------------------------------------------------
# Layout (pure geometry, no drawing)
# ---------------------------------------------------------------------------


@dataclass
class BarLayout:
    """Where and how one result is drawn."""

    result: BenchmarkResult
    x: float
    y: float
    width: float
    height: float
    colors: tuple[str, str]
    value_label: str
    show_manager: bool  # only the first row of each block names the manager


def max_elapsed(results: list[BenchmarkResult]) -> int:
    """Longest elapsed time in *results*, or 0 when there are none."""
    return max((r.elapsed_ms for r in results), default=0)


def bar_widths(results: list[BenchmarkResult], max_bar_width: float) -> list[float]:
    """Bar lengths proportional to elapsed time.

    The slowest result gets *max_bar_width*.  When every result took
    0 ms (or there are none) all bars have length 0.
    """
    max_time = max_elapsed(results)
    if max_time == 0:
        return [0.0 for _ in results]
    return [r.elapsed_ms / max_time * max_bar_width for r in results]


def group_indices(results: list[BenchmarkResult]) -> list[int]:
    """Block number of each result; a new block starts when the manager changes."""
    indices: list[int] = []
    group = -1
    previous: str | None = None
    for r in results:
        if r.package_manager != previous:
            group += 1
            previous = r.package_manager
        indices.append(group)
    return indices


def row_top(index: int, group: int, spec: ChartSpec) -> float:
    """y coordinate of the top of row *index* in block *group*."""
    pitch = spec.bar_height + spec.bar_spacing
    return spec.top_margin + index * pitch + group * spec.group_spacing


def value_label(result: BenchmarkResult) -> str:
    """Duration text drawn right of a bar."""
    return format_elapsed(result.elapsed_ms) + format_status_marker(result.status)


def layout_bars(results: list[BenchmarkResult], spec: ChartSpec) -> list[BarLayout]:
    """Compute the position, size, colour and label of every bar."""
    widths = bar_widths(results, spec.max_bar_width)
    groups = group_indices(results)
    bars: list[BarLayout] = []
    for i, (result, width, group) in enumerate(zip(results, widths, groups)):
        bars.append(
            BarLayout(
                result=result,
                x=float(spec.bar_x),
                y=float(row_top(i, group, spec)),
                width=width,
                height=float(spec.bar_height),
                colors=spec.colors_for(result.package_manager),
                value_label=value_label(result),
                show_manager=i == 0 or groups[i - 1] != group,
            )
        )
    return bars


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------


def _rounded_rect(
    x: float, y: float, width: float, height: float, radius: float, **kwargs: Any
) -> FancyBboxPatch:
    radius = max(0.0, min(radius, width / 2, height / 2))
    return FancyBboxPatch(
        (x, y),
        width,
        height,
        boxstyle=f"round,pad=0,rounding_size={radius}",
        **kwargs,
    )


def _draw_bar(ax: Any, bar: BarLayout, spec: ChartSpec) -> None:
    patch = _rounded_rect(
        bar.x,
        bar.y,
        bar.width,
        bar.height,
        spec.corner_radius,
        facecolor=bar.colors[1],
        edgecolor="none",
    )
    ax.add_patch(patch)

    cmap = LinearSegmentedColormap.from_list("bar", list(bar.colors))
    gradient = np.linspace(0.0, 1.0, 256).reshape(1, -1)
    im = ax.imshow(
        gradient,
        cmap=cmap,
        extent=(bar.x, bar.x + bar.width, bar.y + bar.height, bar.y),
        aspect="auto",
        interpolation="bilinear",
    )
    im.set_clip_path(patch)


def _draw_labels(ax: Any, bar: BarLayout, spec: ChartSpec) -> None:
    text_kw = {"color": spec.text_color, "family": spec.font_family, "fontweight": "bold"}
    if bar.show_manager:
        ax.text(
            spec.margin,
            bar.y + bar.height * 0.45,
            bar.result.package_manager,
            fontsize=spec.font_size(spec.manager_font_px),
            va="baseline",
            **text_kw,
        )
    ax.text(
        spec.margin,
        bar.y + bar.height * 0.9,
        bar.result.category,
        fontsize=spec.font_size(spec.category_font_px),
        va="baseline",
        **text_kw,
    )
    ax.text(
        bar.x + bar.width + 10,
        bar.y + bar.height / 2,
        bar.value_label,
        fontsize=spec.font_size(spec.value_font_px),
        va="center",
        **text_kw,
    )


def render_chart(
    results: list[BenchmarkResult],
    spec: ChartSpec | None = None,
    *,
    date_label: str = "",
    background: Any = None,
) -> bytes:
    """Render *results* into a PNG image.

    Args:
        results: Results in the order they should be drawn, top to bottom.
        spec: Chart geometry and styling.  Defaults to :class:`ChartSpec`.
        date_label: Text drawn in the top right corner, usually the run date.
        background: Optional image array (as returned by
            :func:`load_background`) stretched over the canvas.

    Returns:
        PNG bytes.  An empty *results* list yields a canvas with no bars.
    """
    spec = spec or ChartSpec()
    width, height = spec.width, spec.height

    fig = Figure(figsize=(width / spec.dpi, height / spec.dpi), dpi=spec.dpi)
    fig.patch.set_alpha(0.0)
    canvas = FigureCanvasAgg(fig)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    ax.set_axis_off()
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_autoscale_on(False)

    board = _rounded_rect(
        0,
        0,
        width,
        height,
        spec.canvas_radius,
        facecolor=spec.background_color,
        edgecolor="none",
    )
    ax.add_patch(board)
    if background is not None:
        im = ax.imshow(background, extent=(0, width, height, 0), aspect="auto")
        im.set_clip_path(board)

    text_kw = {
        "color": spec.text_color,
        "family": spec.font_family,
        "fontweight": "bold",
        "ha": "right",
        "va": "baseline",
    }
    if date_label:
        ax.text(
            width - spec.margin,
            70,
            date_label,
            fontsize=spec.font_size(spec.title_font_px),
            **text_kw,
        )
    ax.text(
        width - spec.margin,
        125,
        "(lower = better)",
        fontsize=spec.font_size(spec.subtitle_font_px),
        **text_kw,
    )

    for bar in layout_bars(results, spec):
        if bar.width > 0:
            _draw_bar(ax, bar, spec)
        _draw_labels(ax, bar, spec)

    # imshow may have touched the limits.
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)

    buf = io.BytesIO()
    canvas.print_png(buf, metadata={"Software": None})
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Background image
# ---------------------------------------------------------------------------


def load_background(path: Path) -> Any:
    """Load a decorative background image as an array.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file cannot be decoded as an image.
    """
    if not path.exists():
        raise FileNotFoundError(f"Background image not found: {path}")
    try:
        return mpimg.imread(path)
    except (SyntaxError, OSError, ValueError) as exc:
        # Pillow reports some corrupt files as SyntaxError.
        raise ValueError(f"Cannot decode background image {path}: {exc}") from exc
