"""
Configuration service for generation settings.

Provides a single source of truth for encoder and project configuration,
loaded once from the packaged JSON file and handed explicitly to the
components that need it.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional

from slideshow.env_config import (
    DEFAULT_STORAGE_DIR,
    FFMPEG_BINARY,
    STAGING_SUBDIR,
    VIDEOS_SUBDIR,
)


@dataclass
class GenerationSettings:
    """Settings consumed by the generation pipeline.

    Every path the pipeline touches is derived from ``storage_dir`` so the
    process working directory never matters.
    """
    storage_dir: Path
    width: int = 1920
    height: int = 1080
    video_codec: str = "libx264"
    crf: int = 23
    preset: str = "medium"
    pixel_format: str = "yuv420p"
    pad_color: str = "black"
    timeout_seconds: Optional[float] = 600
    allow_placeholder: bool = True
    output_extension: str = ".mp4"
    ffmpeg_binary: Optional[str] = None

    @property
    def staging_root(self) -> Path:
        """Directory holding per-attempt staging areas."""
        return Path(self.storage_dir).resolve() / STAGING_SUBDIR

    @property
    def videos_subdir(self) -> str:
        """Store-relative directory for generated videos."""
        return VIDEOS_SUBDIR


class ConfigService:
    """Service for loading and providing pipeline configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize the configuration service.

        Args:
            config_path: Path to configuration JSON file.
                        Defaults to slideshow/config/pipeline_config.json
        """
        if config_path is None:
            package_dir = Path(__file__).parent.parent
            config_path = package_dir / "config" / "pipeline_config.json"

        self.config_path = config_path
        self._config = None

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from JSON file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            json.JSONDecodeError: If config file is invalid JSON
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            return json.load(f)

    @property
    def config(self) -> Dict[str, Any]:
        """Get the full configuration (cached)."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def get_encoder_config(self) -> Dict[str, Any]:
        """Get encoder settings (resolution, codec, timeout)."""
        return self.config.get("encoder", {})

    def get_project_defaults(self) -> Dict[str, Any]:
        """Get default and bounding values for new projects."""
        return self.config.get("projectDefaults", {})

    def get_supported_image_types(self) -> Dict[str, str]:
        """Get mapping of accepted MIME types to file extensions.

        Returns:
            Dictionary like {'image/png': '.png'}
        """
        return self.config.get("supportedImageTypes", {})

    def get_generation_settings(self, storage_dir: Optional[Path] = None) -> GenerationSettings:
        """Build the settings object handed to the generation pipeline.

        Args:
            storage_dir: Artifact store root. Defaults to DEFAULT_STORAGE_DIR.
        """
        encoder = self.get_encoder_config()
        return GenerationSettings(
            storage_dir=Path(storage_dir) if storage_dir else DEFAULT_STORAGE_DIR,
            width=int(encoder.get("width", 1920)),
            height=int(encoder.get("height", 1080)),
            video_codec=encoder.get("videoCodec", "libx264"),
            crf=int(encoder.get("crf", 23)),
            preset=encoder.get("preset", "medium"),
            pixel_format=encoder.get("pixelFormat", "yuv420p"),
            pad_color=encoder.get("padColor", "black"),
            timeout_seconds=encoder.get("timeoutSeconds", 600),
            allow_placeholder=bool(encoder.get("allowPlaceholder", True)),
            output_extension=self.config.get("outputExtension", ".mp4"),
            ffmpeg_binary=FFMPEG_BINARY,
        )


# Global instance for easy import
_config_service = None

def get_config_service() -> ConfigService:
    """Get the global configuration service instance."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service
