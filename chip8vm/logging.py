"""Console logging for the host and headless runs.

``logger`` is the package-wide console logger. ``scan_with_progress`` wraps a
``jax.lax.scan`` body so a compiled frame loop reports progress to a tqdm bar
through ``io_callback``.
"""

import sys
import time
from typing import Callable, Optional

import jax
from jax.experimental import io_callback
from tqdm import tqdm

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"


class ConsoleLogger:
    """Levelled logger printing ``[elapsed][LEVEL][name] message`` lines."""

    def __init__(self, name: str = "chip8vm", log_level: str = "INFO", use_colors: bool = True):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.start_time = time.time()

    def _should_log(self, level: str) -> bool:
        return LEVELS.index(level) >= LEVELS.index(self.log_level)

    def log(self, level: str, message: str):
        if not self._should_log(level):
            return
        level_str = f"[{level:>7s}]"
        if self.use_colors:
            level_str = f"{_COLORS[level]}{level_str}{_RESET}"
        elapsed = time.time() - self.start_time
        print(f"[{elapsed:8.2f}s]{level_str}[{self.name}] {message}", flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)


logger = ConsoleLogger()


def scan_with_progress(num_frames: int, print_rate: Optional[int] = None) -> Callable:
    """Decorate a scan body over ``jnp.arange(num_frames)`` with a tqdm bar.

    The bar is opened on the first frame, advanced every ``print_rate`` frames
    and closed after the last one.
    """
    if print_rate is None:
        print_rate = max(1, min(num_frames // 20, 50))
    print_rate = max(1, min(print_rate, num_frames))
    # Frames left over after the last full chunk are flushed on close
    last_chunk_start = num_frames - num_frames % print_rate

    bars = {}

    def _open():
        bars["frames"] = tqdm(total=num_frames, desc=f"Emulating ({num_frames:,} frames)", unit="frame")

    def _advance(frames):
        if "frames" in bars:
            bars["frames"].update(int(frames))

    def _close():
        bar = bars.pop("frames", None)
        if bar is not None:
            bar.update(bar.total - bar.n)
            bar.close()

    def _when(pred, callback, *args):
        jax.lax.cond(
            pred,
            lambda: io_callback(callback, None, *args, ordered=True),
            lambda: None,
        )

    def decorator(body):
        def body_with_progress(carry, frame_index):
            _when(frame_index == 0, _open)
            _when(
                (frame_index > 0) & (frame_index % print_rate == 0) & (frame_index <= last_chunk_start),
                _advance,
                print_rate,
            )
            result = body(carry, frame_index)
            _when(frame_index == num_frames - 1, _close)
            return result

        return body_with_progress

    return decorator
