"""
Utility module for samplebuf.

Contains text rendering helpers built on the public buffer API.
"""

from .formatting import (
    TICKS,
    SparklineConfig,
    type_name,
    summarize,
    sparkline,
    render,
)

__all__ = [
    "TICKS",
    "SparklineConfig",
    "type_name",
    "summarize",
    "sparkline",
    "render",
]
