from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import numpy as np
import pandas as pd

from ..models.config_models import DisplayConfig
from ..services.cleaning import semester_year

"""Static trend chart.

x = numeric semester year (from the label), y = Total, one line with point
markers per university (the aggregate series included), colors from the
display config. Minimal style, no legend.
"""

__all__ = [
    "RenderError",
    "series_by_university",
    "style_axes",
    "all_years",
    "build_trend_figure",
    "save_chart",
]


class RenderError(Exception):
    """Raised when the cleaned table cannot be rendered."""


def series_by_university(table: pd.DataFrame) -> dict[str, tuple[np.ndarray, np.ndarray]]:
    """Split the cleaned table into (years, totals) arrays per university.

    Universities keep the order of first appearance; points are ordered by
    year. Absent totals become NaN (gap in the line).
    """
    if table.empty:
        raise RenderError("cleaned table is empty, nothing to render")
    frame = table.assign(Year=table["Semester"].map(semester_year))
    series: dict[str, tuple[np.ndarray, np.ndarray]] = {}
    for name in frame["University"].drop_duplicates():
        sub = frame[frame["University"] == name].sort_values("Year", kind="stable")
        years = sub["Year"].to_numpy(dtype=int)
        totals = sub["Total"].astype("Int64").to_numpy(dtype=float, na_value=np.nan)
        series[str(name)] = (years, totals)
    return series


def style_axes(ax: plt.Axes, years: list[int], display: DisplayConfig) -> None:
    ax.set_title(display.title)
    ax.set_xlabel(display.x_label)
    ax.set_ylabel(display.y_label)

    ax.set_xticks(years)
    ax.set_xticklabels(
        [f"{display.tick_prefix}{y}" for y in years],
        rotation=display.tick_rotation,
        ha="right",
    )
    if len(years) > 1:
        ax.set_xlim(years[0] - 0.5, years[-1] + 1.5)  # 右端にラベル用の余白
    ax.set_ylim(display.y_min, display.y_max)
    ax.yaxis.set_major_formatter(mticker.StrMethodFormatter("{x:,.0f}"))

    # minimal theme
    for side in ("top", "right", "left", "bottom"):
        ax.spines[side].set_visible(False)
    ax.grid(True, color="#EEEEEE", linewidth=0.8)
    ax.tick_params(length=0)


def all_years(series: dict[str, tuple[np.ndarray, np.ndarray]]) -> list[int]:
    return sorted({int(y) for years, _ in series.values() for y in years})


def build_trend_figure(table: pd.DataFrame, display: DisplayConfig) -> tuple[plt.Figure, plt.Axes]:
    series = series_by_university(table)
    fig, ax = plt.subplots(figsize=(10, 6))
    for name, (years, totals) in series.items():
        ax.plot(years, totals, marker="o", markersize=4, color=display.color_for(name), label=name)
    style_axes(ax, all_years(series), display)
    fig.tight_layout()
    return fig, ax


def save_chart(table: pd.DataFrame, display: DisplayConfig, path: Path, dpi: int = 100) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig, _ = build_trend_figure(table, display)
    try:
        fig.savefig(path, dpi=dpi)
    finally:
        plt.close(fig)
    return path
