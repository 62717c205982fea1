"""
Text rendering of buffers.

Builds human-readable summaries and per-channel sparklines. Only the public
buffer API is used (frame/channel counts, rate, dtype, indexing).
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

# Eight-level amplitude ramp, lowest to highest
TICKS = ("▁", "▂", "▃", "▄", "▅", "▆", "▇", "█")


@dataclass
class SparklineConfig:
    """
    Configuration for sparkline rendering.

    Attributes:
        width: Maximum number of glyphs per channel
        floor_db: Level mapped to the lowest glyph (and everything below)
        ceiling_db: Level mapped to the highest glyph (and everything above)
    """
    width: int = 80
    floor_db: float = -60.0
    ceiling_db: float = 0.0

    def __post_init__(self):
        if self.width < 1:
            raise ValueError("Sparkline width must be at least 1")
        if self.floor_db >= self.ceiling_db:
            raise ValueError("Sparkline floor must be below the ceiling")


def type_name(buf) -> str:
    """
    Short type description.

    Returns:
        e.g. "TimeBuffer[float64, 2]"
    """
    return f"{type(buf).__name__}[{buf.dtype}, {buf.ndim}]"


def summarize(buf) -> str:
    """
    Two-line summary of a buffer.

    Example for a 1-second stereo signal at 44.1 kHz:
        44100-frame, 2-channel TimeBuffer[float64, 2]
        1.0s sampled at 44100.0Hz
    """
    length = buf.nframes / buf.samplerate
    return (
        f"{buf.nframes}-frame, {buf.nchannels}-channel {type_name(buf)}\n"
        f"{length}{buf.domain_unit} sampled at {buf.samplerate}{buf.rate_unit}"
    )


def sparkline(buf, config: Optional[SparklineConfig] = None) -> list[str]:
    """
    Render each channel as a line of block glyphs.

    The buffer is split into at most ``config.width`` blocks. For every
    block the peak absolute value is converted to dB, clamped to
    [floor_db, ceiling_db] and mapped onto ``TICKS``.

    Args:
        buf: Buffer to render
        config: Sparkline configuration

    Returns:
        One string per channel
    """
    if config is None:
        config = SparklineConfig()

    n = buf.nframes
    if n == 0:
        return [""] * buf.nchannels

    blockwidth = math.ceil(n / config.width)
    nblocks = math.ceil(n / blockwidth)
    span = config.ceiling_db - config.floor_db

    columns = []
    for blk in range(nblocks):
        start = blk * blockwidth
        stop = min(start + blockwidth, n)
        block = np.abs(np.asarray(buf[start:stop])).reshape(stop - start, -1)
        peaks = block.max(axis=0).astype(np.float64)

        with np.errstate(divide="ignore"):
            levels = 20 * np.log10(peaks)
        levels = np.clip(levels, config.floor_db, config.ceiling_db)

        idxs = ((levels - config.floor_db) / span * (len(TICKS) - 1)).astype(int)
        columns.append([TICKS[i] for i in idxs])

    return ["".join(column[ch] for column in columns) for ch in range(buf.nchannels)]


def render(
    buf,
    show_channels: bool = True,
    config: Optional[SparklineConfig] = None,
) -> str:
    """Summary followed by one sparkline per channel."""
    lines = [summarize(buf)]
    if show_channels and buf.nframes > 0:
        lines.extend(sparkline(buf, config))
    return "\n".join(lines)
