from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.animation import FuncAnimation, PillowWriter

from ..models.config_models import DisplayConfig
from ..services.progress import FrameProgress
from .chart import all_years, series_by_university, style_axes

"""Animated trend chart (GIF).

Frame i reveals every series up to the i-th semester year; each line carries
its university name as a text label next to its newest point.
"""

__all__ = [
    "build_trend_animation",
    "save_animation",
]


def build_trend_animation(
    table: pd.DataFrame, display: DisplayConfig
) -> tuple[plt.Figure, FuncAnimation, int]:
    """Return (figure, animation, frame_count)."""
    series = series_by_university(table)
    years = all_years(series)

    fig, ax = plt.subplots(figsize=(10, 6))
    style_axes(ax, years, display)
    lines = {}
    labels = {}
    for name in series:
        color = display.color_for(name)
        (lines[name],) = ax.plot([], [], marker="o", markersize=4, color=color)
        labels[name] = ax.text(0, 0, "", color=color, ha="left", va="center", fontsize=8)
    fig.tight_layout()

    def update(frame: int):
        cut = years[frame]
        for name, (xs, ys) in series.items():
            shown = xs <= cut
            lines[name].set_data(xs[shown], ys[shown])
            label = labels[name]
            if shown.any() and np.isfinite(ys[shown][-1]):
                label.set_position((xs[shown][-1] + 0.1, ys[shown][-1]))
                label.set_text(name)
            else:
                label.set_text("")
        return [*lines.values(), *labels.values()]

    anim = FuncAnimation(
        fig,
        update,
        frames=len(years),
        interval=display.frame_interval_ms,
        blit=False,
        repeat=False,
    )
    return fig, anim, len(years)


def save_animation(table: pd.DataFrame, display: DisplayConfig, path: Path, dpi: int = 100) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig, anim, frame_count = build_trend_animation(table, display)
    try:
        with FrameProgress(frame_count, description=f"Rendering {path.name}") as progress:
            anim.save(path, writer=PillowWriter(fps=display.fps), dpi=dpi, progress_callback=progress)
    finally:
        plt.close(fig)
    return path
