"""Encoder adapter - turns staged frames into a video with ffmpeg.

The strategy is chosen once at startup by ``create_encoder``:
``FFmpegEncoder`` when the binary can be found, otherwise (if allowed by
configuration) ``PlaceholderEncoder``, which writes a marker file instead
of a real video and says so loudly in the logs.
"""

import json
import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from slideshow.services.config_service import GenerationSettings
from slideshow.services.errors import EncodeFailedError
from slideshow.utils.media import find_tool
from slideshow.utils.process import ProcessRunner

logger = logging.getLogger(__name__)

FILTER_SCRIPT_NAME = "filtergraph.txt"


def format_seconds(seconds: float) -> str:
    """Render a duration for ffmpeg without float noise (2.5 -> '2.5')."""
    return f"{seconds:.6f}".rstrip("0").rstrip(".")


@dataclass
class EncodePlan:
    """Composition plan: every frame scaled, padded and held, then concatenated."""
    frame_paths: List[Path]
    seconds_per_frame: float
    fps: int
    width: int
    height: int
    pad_color: str = "black"
    pixel_format: str = "yuv420p"

    @property
    def frame_count(self) -> int:
        return len(self.frame_paths)

    @property
    def duration(self) -> float:
        """Declared output duration in seconds."""
        return self.frame_count * self.seconds_per_frame

    def frame_filter(self, index: int) -> str:
        w, h = self.width, self.height
        return (
            f"[{index}:v]"
            f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
            f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2:color={self.pad_color},"
            f"setsar=1,fps={self.fps},format={self.pixel_format}"
            f"[v{index}]"
        )

    def filter_graph(self) -> str:
        """Full filter graph, one chain per frame followed by the concat."""
        chains = [self.frame_filter(i) for i in range(self.frame_count)]
        labels = "".join(f"[v{i}]" for i in range(self.frame_count))
        chains.append(f"{labels}concat=n={self.frame_count}:v=1:a=0[out]")
        return ";\n".join(chains)


def build_plan(
    frame_paths: Sequence[Path],
    seconds_per_frame: float,
    fps: int,
    settings: GenerationSettings,
) -> EncodePlan:
    """Validate encode inputs and build the composition plan."""
    if not frame_paths:
        raise ValueError("At least one frame is required")
    if seconds_per_frame <= 0:
        raise ValueError(f"seconds_per_frame must be positive, got {seconds_per_frame}")
    if fps < 1:
        raise ValueError(f"fps must be at least 1, got {fps}")

    return EncodePlan(
        frame_paths=[Path(p) for p in frame_paths],
        seconds_per_frame=float(seconds_per_frame),
        fps=int(fps),
        width=settings.width,
        height=settings.height,
        pad_color=settings.pad_color,
        pixel_format=settings.pixel_format,
    )


class Encoder(ABC):
    """Capability interface for producing a video from ordered frames."""

    name = "encoder"
    is_placeholder = False

    @abstractmethod
    def encode(
        self,
        frame_paths: Sequence[Path],
        output_path: Path,
        seconds_per_frame: float,
        fps: int,
    ) -> None:
        """Write the video to ``output_path`` or raise EncodeFailedError."""
        pass


class FFmpegEncoder(Encoder):
    """Spawns ffmpeg with a per-frame scale/pad/hold plan and a concat."""

    name = "ffmpeg"

    def __init__(
        self,
        settings: GenerationSettings,
        binary: Optional[str] = None,
        runner: Optional[ProcessRunner] = None,
    ):
        self.settings = settings
        self.binary = str(binary or "ffmpeg")
        self.runner = runner or ProcessRunner()

    @staticmethod
    def partial_path(output_path: Path) -> Path:
        """Sibling file ffmpeg writes to before the final rename."""
        output_path = Path(output_path)
        return output_path.with_name(f"{output_path.stem}.partial{output_path.suffix}")

    def build_command(self, plan: EncodePlan, filter_script: Path, target: Path) -> List[str]:
        """Assemble the ffmpeg argument list for ``plan``."""
        cmd = [self.binary, "-hide_banner", "-nostats", "-y"]

        hold = format_seconds(plan.seconds_per_frame)
        for frame in plan.frame_paths:
            cmd.extend([
                "-loop", "1",
                "-framerate", str(plan.fps),
                "-t", hold,
                "-i", str(frame),
            ])

        cmd.extend([
            "-filter_complex_script", str(filter_script),
            "-map", "[out]",
            "-r", str(plan.fps),
            "-c:v", self.settings.video_codec,
            "-preset", self.settings.preset,
            "-crf", str(self.settings.crf),
            "-pix_fmt", plan.pixel_format,
            "-movflags", "+faststart",
            "-an",
            str(target),
        ])
        return cmd

    def encode(
        self,
        frame_paths: Sequence[Path],
        output_path: Path,
        seconds_per_frame: float,
        fps: int,
    ) -> None:
        plan = build_plan(frame_paths, seconds_per_frame, fps, self.settings)
        output_path = Path(output_path)
        partial = self.partial_path(output_path)

        # Filter graph lives next to the staged frames; it grows with the
        # frame count and would otherwise hit argument length limits.
        filter_script = plan.frame_paths[0].parent / FILTER_SCRIPT_NAME
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            filter_script.write_text(plan.filter_graph(), encoding="utf-8")
        except OSError as e:
            raise EncodeFailedError(
                f"Could not prepare encode: {e}", exit_code=None, diagnostics=str(e)
            ) from e

        cmd = self.build_command(plan, filter_script, partial)
        timeout = self.settings.timeout_seconds

        try:
            result = self.runner.run(
                cmd,
                description=f"Encoding {plan.frame_count} frame(s) → {output_path.name}",
                timeout=timeout,
            )
        except OSError as e:
            raise EncodeFailedError(
                f"Could not start encoder '{self.binary}': {e}",
                exit_code=None,
                diagnostics=str(e),
            ) from e
        except subprocess.TimeoutExpired as e:
            partial.unlink(missing_ok=True)
            output = e.output or ""
            if isinstance(output, bytes):
                output = output.decode("utf-8", errors="replace")
            raise EncodeFailedError(
                f"Encoder timed out after {timeout}s",
                exit_code=None,
                diagnostics=output[-4000:],
            ) from e

        if result.returncode != 0:
            partial.unlink(missing_ok=True)
            logger.error("ffmpeg exited with code %d:\n%s", result.returncode, result.tail())
            raise EncodeFailedError(
                f"Encoder exited with code {result.returncode}",
                exit_code=result.returncode,
                diagnostics=result.tail(),
            )

        if not partial.is_file():
            raise EncodeFailedError(
                "Encoder exited cleanly but produced no output",
                exit_code=result.returncode,
                diagnostics=result.tail(),
            )

        try:
            os.replace(partial, output_path)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise EncodeFailedError(
                f"Could not move encoded video into place: {e}",
                exit_code=None,
                diagnostics=str(e),
            ) from e
        logger.info(
            "Encoded %s (%d frames, %.2fs at %d fps)",
            output_path, plan.frame_count, plan.duration, plan.fps,
        )


class PlaceholderEncoder(Encoder):
    """
    Stand-in used when ffmpeg is not installed.

    Writes a small marker file (not a playable video) so the rest of the
    pipeline keeps working. Every use is logged as a warning.
    """

    name = "placeholder"
    is_placeholder = True
    MARKER = b"SLIDESHOW-PLACEHOLDER-VIDEO\n"

    def __init__(self, settings: GenerationSettings):
        self.settings = settings

    def encode(
        self,
        frame_paths: Sequence[Path],
        output_path: Path,
        seconds_per_frame: float,
        fps: int,
    ) -> None:
        plan = build_plan(frame_paths, seconds_per_frame, fps, self.settings)
        output_path = Path(output_path)

        logger.warning(
            "PLACEHOLDER ENCODE: ffmpeg unavailable, writing marker file %s "
            "instead of a real video (%d frames)",
            output_path, plan.frame_count,
        )
        summary = {
            "placeholder": True,
            "frames": [p.name for p in plan.frame_paths],
            "seconds_per_frame": plan.seconds_per_frame,
            "fps": plan.fps,
            "duration": plan.duration,
            "resolution": [plan.width, plan.height],
        }
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(self.MARKER + json.dumps(summary, indent=2).encode("utf-8"))
        except OSError as e:
            raise EncodeFailedError(
                f"Could not write placeholder output: {e}", exit_code=None, diagnostics=str(e)
            ) from e

    @classmethod
    def is_placeholder_file(cls, path: Path) -> bool:
        """True if ``path`` was written by this encoder."""
        with open(path, "rb") as f:
            return f.read(len(cls.MARKER)) == cls.MARKER


def create_encoder(settings: GenerationSettings) -> Encoder:
    """Select the encoder strategy once, at startup."""
    binary = find_tool("ffmpeg", settings.ffmpeg_binary)
    if binary:
        logger.info("Using ffmpeg encoder at %s", binary)
        return FFmpegEncoder(settings, str(binary))

    if settings.allow_placeholder:
        logger.warning(
            "ffmpeg not found - falling back to PLACEHOLDER encoder; "
            "generated files will not be playable videos"
        )
        return PlaceholderEncoder(settings)

    logger.warning("ffmpeg not found and placeholder disabled - encodes will fail")
    return FFmpegEncoder(settings, settings.ffmpeg_binary or "ffmpeg")
