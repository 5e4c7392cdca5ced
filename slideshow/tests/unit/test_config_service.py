"""Tests for ConfigService."""

import json

import pytest

from slideshow.env_config import STAGING_SUBDIR
from slideshow.services.config_service import ConfigService, get_config_service


class TestConfigService:

    def test_packaged_defaults(self):
        settings = get_config_service().get_generation_settings("/tmp/store")

        assert settings.width == 1920
        assert settings.height == 1080
        assert settings.video_codec == "libx264"
        assert settings.output_extension == ".mp4"

    def test_supported_image_types(self):
        types = get_config_service().get_supported_image_types()
        assert types["image/png"] == ".png"
        assert types["image/jpeg"] == ".jpg"

    def test_custom_config_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({
            "encoder": {"width": 640, "height": 360, "timeoutSeconds": 5, "allowPlaceholder": False},
        }))

        settings = ConfigService(config_path).get_generation_settings(tmp_path / "store")

        assert (settings.width, settings.height) == (640, 360)
        assert settings.timeout_seconds == 5
        assert settings.allow_placeholder is False
        assert settings.crf == 23
        assert settings.staging_root == (tmp_path / "store").resolve() / STAGING_SUBDIR

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigService(tmp_path / "absent.json").config
