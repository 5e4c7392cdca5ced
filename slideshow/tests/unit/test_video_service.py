"""Tests for VideoService."""

import json
import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

from slideshow.services.video_service import (
    VideoService,
    get_video_service,
    parse_frame_rate,
    summarize_probe,
)


def probe_output(duration="7.5", rate="24/1", nb_frames="180", width=320, height=240):
    return json.dumps({
        "format": {"duration": duration},
        "streams": [
            {"codec_type": "video", "width": width, "height": height,
             "r_frame_rate": rate, "nb_frames": nb_frames},
        ],
    })


class TestVideoService:
    """Tests for video metadata extraction."""

    def test_get_video_info(self):
        """Extracts duration, fps, resolution and frame count."""
        result = Mock(returncode=0, stdout=probe_output())
        with patch("slideshow.services.video_service.find_tool", return_value=Path("/usr/bin/ffprobe")), \
                patch("slideshow.services.video_service.subprocess.run", return_value=result) as run:
            info = VideoService().get_video_info(Path("/videos/a.mp4"))

        assert info == {"duration": 7.5, "fps": 24.0, "resolution": [320, 240], "frame_count": 180}
        assert run.call_args.args[0][0] == "/usr/bin/ffprobe"

    def test_frame_count_derived_when_missing(self):
        result = Mock(returncode=0, stdout=probe_output(duration="2.0", rate="30000/1001", nb_frames="0"))
        with patch("slideshow.services.video_service.find_tool", return_value=Path("ffprobe")), \
                patch("slideshow.services.video_service.subprocess.run", return_value=result):
            info = VideoService().get_video_info(Path("a.mp4"))

        assert info["fps"] == 29.97
        assert info["frame_count"] == 60

    def test_no_ffprobe(self):
        with patch("slideshow.services.video_service.find_tool", return_value=None):
            assert VideoService().get_video_info(Path("a.mp4")) == {}

    def test_probe_failure(self):
        result = Mock(returncode=1, stdout="")
        with patch("slideshow.services.video_service.find_tool", return_value=Path("ffprobe")), \
                patch("slideshow.services.video_service.subprocess.run", return_value=result):
            assert VideoService().get_video_info(Path("a.mp4")) == {}

    def test_no_video_stream(self):
        result = Mock(returncode=0, stdout=json.dumps({"format": {}, "streams": [{"codec_type": "audio"}]}))
        with patch("slideshow.services.video_service.find_tool", return_value=Path("ffprobe")), \
                patch("slideshow.services.video_service.subprocess.run", return_value=result):
            assert VideoService().get_video_info(Path("a.mp4")) == {}

    def test_timeout_is_logged_not_raised(self, caplog):
        with patch("slideshow.services.video_service.find_tool", return_value=Path("ffprobe")), \
                patch("slideshow.services.video_service.subprocess.run",
                      side_effect=subprocess.TimeoutExpired(["ffprobe"], 30)):
            with caplog.at_level("WARNING"):
                assert VideoService().get_video_info(Path("a.mp4")) == {}
        assert "Error getting video info" in caplog.text

    def test_singleton(self):
        assert get_video_service() is get_video_service()


class TestProbeParsing:

    def test_parse_frame_rate(self):
        assert parse_frame_rate("24/1") == 24.0
        assert parse_frame_rate("25") == 25.0
        assert parse_frame_rate("0/0") == 0.0

    def test_summarize_picks_video_stream(self):
        probe = json.loads(probe_output())
        probe["streams"].insert(0, {"codec_type": "audio"})

        assert summarize_probe(probe)["resolution"] == [320, 240]
