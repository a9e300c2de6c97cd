"""Shared utilities for the MemoryStack plugin."""

from .datetime import utc_now, utc_now_iso
from .text import format_confidence, preview

__all__ = [
    "utc_now",
    "utc_now_iso",
    "format_confidence",
    "preview",
]
