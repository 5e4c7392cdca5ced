"""Slideshow utilities package."""

from .media import (
    find_tool,
    frame_digits,
    frame_name,
    sanitize_filename,
)
from .process import ProcessResult, ProcessRunner

__all__ = [
    "find_tool",
    "frame_digits",
    "frame_name",
    "sanitize_filename",
    "ProcessResult",
    "ProcessRunner",
]
