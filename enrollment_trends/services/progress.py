from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

Used while writing the animation: one tick per rendered frame. In non-TTY
environments (CI, redirected output) no bar is created so the log stays free
of ANSI control sequences.
"""

__all__ = [
    "FrameProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class FrameProgress:
    """Progress bar over animation frames.

    Instances are callable with matplotlib's `progress_callback` signature
    `(current_frame, total_frames)`.
    """

    def __init__(self, total_frames: int, *, description: str = "Rendering frames") -> None:
        self.total_frames = total_frames
        self.description = description
        self.current_frame = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_frames,
                desc=description,
                unit="frame",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, current_frame: int, total_frames: int | None = None) -> None:
        # matplotlib は 0 始まりの frame 番号を渡す
        done = current_frame + 1
        step = done - self.current_frame
        self.current_frame = done
        if self.enabled and self.pbar is not None and step > 0:
            self.pbar.update(step)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> FrameProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
