"""
Render benchmark timings as one panel per benchmark group.

All panels share the y range (max of mean + std dev over every group, plus
15% headroom) and a fixed log x range of 1..1000 statements, so groups can
be compared by eye. A free grid cell, if any, holds the legend.

How to run:
  python plot.py
  python plot.py --output results/benchmark_results.png --csv results/summary.csv
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import math
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.patches import Rectangle  # noqa: E402

from backends import Backend, default_registry  # noqa: E402
from corpus import DATASET_FILES, GROUP_TITLES, GROUPS, load_groups  # noqa: E402
from estimates import Measurement  # noqa: E402
from results import (  # noqa: E402
    ResultStoreError,
    ResultTable,
    format_results,
    load_results,
    write_summary_csv,
)
from settings import Settings, configure_logging, default_config_path, load_settings  # noqa: E402

logger = logging.getLogger(__name__)

Point = Tuple[float, float, float]
Segment = Tuple[Tuple[float, float], Tuple[float, float]]
Rect = Tuple[float, float, float, float]

# Pixel margins around the panel grid and inside each panel
MARGIN_TOP = 50
MARGIN_BOTTOM = 20
MARGIN_SIDE = 10
PANEL_MARGIN = 10
CAPTION_SIZE = 25
X_LABEL_AREA = 35
Y_LABEL_AREA = 55

LEGEND_LINE_HEIGHT = 30
LEGEND_SWATCH = (20, 12)


# Geometry

def global_y_max_ms(table: ResultTable, headroom: float = 1.15) -> float:
    upper = 0.0
    for group_results in table.values():
        for backend_results in group_results.values():
            for m in backend_results.values():
                upper = max(upper, m.upper_ms)
    return upper * headroom


def grid_shape(n_panels: int, columns: int = 3) -> Tuple[int, int]:
    return math.ceil(n_panels / columns), columns


def canvas_size(rows: int, cols: int, settings: Settings) -> Tuple[int, int]:
    return cols * settings.panel_width, rows * settings.panel_height + settings.header_height


def legend_slot(n_panels: int, rows: int, cols: int) -> Optional[int]:
    if n_panels < rows * cols:
        return n_panels
    return None


def series_points(backend_results: Mapping[int, Measurement]) -> List[Point]:
    return [
        (float(size), m.mean_ms, m.std_dev_ms)
        for size, m in sorted(backend_results.items())
    ]


def error_bar_segments(x: float, y: float, std_dev: float, cap_fraction: float = 0.08) -> List[Segment]:
    """
    Whisker plus two caps. The cap half-width is a fraction of x so caps
    look the same width on a log axis
    """
    if std_dev <= 0.0:
        return []
    cap = x * cap_fraction
    lo, hi = y - std_dev, y + std_dev
    return [
        ((x, lo), (x, hi)),
        ((x - cap, hi), (x + cap, hi)),
        ((x - cap, lo), (x + cap, lo)),
    ]


def cell_rect(index: int, rows: int, cols: int, width: int, height: int) -> Rect:
    """
    Grid cell as (left, bottom, width, height) in figure fractions
    """
    cell_w = (width - 2 * MARGIN_SIDE) / cols
    cell_h = (height - MARGIN_TOP - MARGIN_BOTTOM) / rows
    row, col = divmod(index, cols)
    x0 = MARGIN_SIDE + col * cell_w
    top = MARGIN_TOP + row * cell_h
    return x0 / width, (height - top - cell_h) / height, cell_w / width, cell_h / height


def axes_rect(cell: Rect, width: int, height: int) -> Rect:
    left, bottom, w, h = cell
    inset_left = (PANEL_MARGIN + Y_LABEL_AREA) / width
    inset_right = PANEL_MARGIN / width
    inset_top = (PANEL_MARGIN + CAPTION_SIZE) / height
    inset_bottom = (PANEL_MARGIN + X_LABEL_AREA) / height
    return (
        left + inset_left,
        bottom + inset_bottom,
        w - inset_left - inset_right,
        h - inset_top - inset_bottom,
    )


def _pt(px: float, dpi: int) -> float:
    return px * 72.0 / dpi


# Drawing

def draw_panel(ax, title: str, group_results: Mapping[str, Mapping[int, Measurement]],
               backends: Sequence[Backend], settings: Settings, y_max: float) -> None:
    dpi = settings.dpi
    ax.set_title(title, fontsize=_pt(16, dpi))
    ax.set_xscale("log")
    ax.set_xlim(*settings.x_domain)
    ax.set_ylim(0.0, y_max)
    ax.set_xlabel("Statements", fontsize=_pt(12, dpi))
    ax.set_ylabel("Time (ms)", fontsize=_pt(12, dpi))
    ax.tick_params(labelsize=_pt(11, dpi))
    ax.grid(True, which="major", color="#dddddd", linewidth=0.6)

    for backend in backends:
        backend_results = group_results.get(backend.key)
        if not backend_results:
            continue
        points = series_points(backend_results)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]

        ax.plot(xs, ys, color=backend.color, linewidth=2)
        ax.plot(xs, ys, linestyle="none", marker="o", markersize=_pt(10, dpi), color=backend.color)

        for x, y, sd in points:
            for (x0, y0), (x1, y1) in error_bar_segments(x, y, sd, settings.cap_fraction):
                ax.plot([x0, x1], [y0, y1], color=backend.color, linewidth=1)


def draw_legend(ax, backends: Sequence[Backend], cell_px: Tuple[float, float], settings: Settings) -> None:
    """Colour swatch plus label per backend, stacked and centred in the cell."""
    ax.set_axis_off()
    cell_w, cell_h = cell_px
    center_x = cell_w / 2
    center_y = cell_h / 2
    start_y = center_y - (len(backends) * LEGEND_LINE_HEIGHT) / 2
    swatch_w, swatch_h = LEGEND_SWATCH

    for i, backend in enumerate(backends):
        # pixel rows grow downwards; axes fractions grow upwards
        y = start_y + i * LEGEND_LINE_HEIGHT
        ax.add_patch(Rectangle(
            ((center_x - 100) / cell_w, 1 - (y + swatch_h) / cell_h),
            swatch_w / cell_w,
            swatch_h / cell_h,
            transform=ax.transAxes,
            facecolor=backend.color,
            edgecolor="none",
        ))
        ax.text(
            (center_x - 75) / cell_w,
            1 - (y + swatch_h / 2) / cell_h,
            backend.label,
            transform=ax.transAxes,
            ha="left",
            va="center",
            fontsize=_pt(14, settings.dpi),
        )


def plotted_groups(table: ResultTable) -> List[str]:
    return [g for g in GROUPS if table.get(g)]


def render(table: ResultTable, settings: Settings, backends: Iterable[Backend], output: Optional[Path] = None) -> Path:
    groups = plotted_groups(table)
    if not groups:
        raise ResultStoreError("No valid benchmark groups found.")
    backends = list(backends)
    output = Path(output or settings.output_file)

    rows, cols = grid_shape(len(groups), settings.columns)
    width, height = canvas_size(rows, cols, settings)
    y_max = global_y_max_ms(table, settings.y_headroom)
    if y_max <= 0.0:
        y_max = 1.0

    fig = plt.figure(figsize=(width / settings.dpi, height / settings.dpi), dpi=settings.dpi)
    fig.patch.set_facecolor("white")
    fig.text(0.5, 1 - 30 / height, settings.title, ha="center", va="center", fontsize=_pt(24, settings.dpi))

    for idx, group in enumerate(groups):
        cell = cell_rect(idx, rows, cols, width, height)
        ax = fig.add_axes(axes_rect(cell, width, height))
        draw_panel(ax, GROUP_TITLES.get(group, group), table[group], backends, settings, y_max)

    slot = legend_slot(len(groups), rows, cols)
    if slot is not None:
        cell = cell_rect(slot, rows, cols, width, height)
        ax = fig.add_axes(cell)
        draw_legend(ax, backends, (cell[2] * width, cell[3] * height), settings)

    output.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output, dpi=settings.dpi, facecolor="white")
    plt.close(fig)
    return output


# Main

def corpus_lengths(data_dir: Path) -> Optional[Dict[str, int]]:
    """
    Group sizes of whatever corpora are on disk; None when no corpus file exists
    """
    data_dir = Path(data_dir)
    if not any((data_dir / name).exists() for name in DATASET_FILES.values()):
        return None
    return {g: len(c) for g, c in load_groups(data_dir).items() if len(c)}


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Plot SQL parser benchmark results")
    ap.add_argument("--config", type=str, default=default_config_path(), help="INI settings file")
    ap.add_argument("--store", type=str, default=None, help="Result store root (overrides settings)")
    ap.add_argument("--output", type=str, default=None, help="Image path; format follows the suffix")
    ap.add_argument("--csv", type=str, default=None, help="Also write a per-cell summary CSV")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    configure_logging(args.verbose)
    settings = load_settings(args.config)
    if args.store:
        settings = dataclasses.replace(settings, store_root=Path(args.store))
    output = Path(args.output) if args.output else settings.output_file

    backends = default_registry()
    try:
        table = load_results(settings, backends, corpus_lengths(settings.data_dir))
        print(format_results(table, backends))
        saved = render(table, settings, backends, output)
    except ResultStoreError as exc:
        logger.error("%s", exc)
        return 1

    if args.csv:
        n = write_summary_csv(table, Path(args.csv), backends)
        print(f"\nWrote {n} rows to {args.csv}")
    print(f"\n\nPlot saved to {saved}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
