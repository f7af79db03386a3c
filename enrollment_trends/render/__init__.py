"""Chart and animation rendering of the cleaned enrollment table."""

import matplotlib

# ヘッドレス環境 (CI / サーバ) 前提
matplotlib.use("Agg")

from .chart import RenderError, build_trend_figure, save_chart  # noqa: E402
from .animation import build_trend_animation, save_animation  # noqa: E402

__all__ = [
    "RenderError",
    "build_trend_figure",
    "save_chart",
    "build_trend_animation",
    "save_animation",
]
