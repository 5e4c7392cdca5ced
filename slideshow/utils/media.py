"""Media utilities for tool lookup and frame naming."""

import shutil
from pathlib import Path
from typing import Optional

MIN_FRAME_DIGITS = 4


def find_tool(tool_name: str, explicit: Optional[str] = None) -> Optional[Path]:
    """Find a tool executable.

    Search order:
    1. Explicitly configured binary (path or name)
    2. System PATH

    Args:
        tool_name: Name of the tool (e.g., 'ffmpeg', 'ffprobe')
        explicit: Configured override, if any

    Returns:
        Path to the executable if found, None otherwise.
    """
    if explicit:
        explicit_path = Path(explicit)
        if explicit_path.is_file():
            return explicit_path
        resolved = shutil.which(explicit)
        return Path(resolved) if resolved else None

    path_result = shutil.which(tool_name)
    if path_result:
        return Path(path_result)

    return None


def frame_digits(frame_count: int) -> int:
    """Zero-padding width so names sort lexicographically in frame order.

    At least four digits; wider when the largest index needs more.
    """
    if frame_count <= 0:
        return MIN_FRAME_DIGITS
    return max(MIN_FRAME_DIGITS, len(str(frame_count - 1)))


def frame_name(index: int, frame_count: int, suffix: str = "") -> str:
    """Sequential frame file name, e.g. ``frame_0003.png``."""
    return f"frame_{index:0{frame_digits(frame_count)}d}{suffix.lower()}"


def sanitize_filename(name: str) -> str:
    """Sanitize an uploaded filename for filesystem use."""
    path = Path(name)
    stem = "".join(c if c.isalnum() or c in "-_" else "_" for c in path.stem)
    stem = stem.strip("_") or "image"
    suffix = "".join(c for c in path.suffix if c.isalnum() or c == ".")
    return f"{stem}{suffix.lower()}"
