"""Video inspection for generated outputs (ffprobe)."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

from slideshow.env_config import FFPROBE_BINARY
from slideshow.utils.media import find_tool

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_SECONDS = 30


def parse_frame_rate(rate: str) -> float:
    """Parse an ffprobe rational such as ``30000/1001``; 0.0 if undefined."""
    if "/" not in rate:
        return float(rate)
    num, den = rate.split("/", 1)
    return float(num) / float(den) if float(den) != 0 else 0.0


def summarize_probe(probe: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce ffprobe JSON to duration, fps, resolution and frame count."""
    stream = next(
        (s for s in probe.get("streams", []) if s.get("codec_type") == "video"),
        None,
    )
    if stream is None:
        return {}

    duration = float(probe.get("format", {}).get("duration", 0))
    fps = parse_frame_rate(stream.get("r_frame_rate", "0/1"))
    frame_count = int(stream.get("nb_frames", 0)) or int(round(duration * fps))

    return {
        "duration": round(duration, 2),
        "fps": round(fps, 2),
        "resolution": [int(stream.get("width", 0)), int(stream.get("height", 0))],
        "frame_count": frame_count,
    }


class VideoService:
    """Reads metadata of generated videos; never raises on bad input."""

    def __init__(self, ffprobe_binary: Optional[str] = FFPROBE_BINARY):
        self.ffprobe_binary = ffprobe_binary

    def get_video_info(self, video_path: Path) -> dict:
        """Probe ``video_path``.

        Returns:
            Dict with duration, fps, resolution and frame_count, or an
            empty dict if ffprobe is unavailable or cannot read the file
        """
        ffprobe_path = find_tool("ffprobe", self.ffprobe_binary)
        if not ffprobe_path:
            return {}

        cmd = [
            str(ffprobe_path), "-v", "quiet",
            "-print_format", "json",
            "-show_format", "-show_streams",
            str(video_path),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=PROBE_TIMEOUT_SECONDS)
            if result.returncode != 0:
                logger.debug("ffprobe could not read %s (exit %d)", video_path, result.returncode)
                return {}
            return summarize_probe(json.loads(result.stdout))
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            logger.warning("Error getting video info for %s: %s", video_path, e)
            return {}


_video_service = None


def get_video_service() -> VideoService:
    """Get singleton video service instance."""
    global _video_service
    if _video_service is None:
        _video_service = VideoService()
    return _video_service
