"""Tests for media utilities."""

from pathlib import Path
from unittest.mock import patch

from slideshow.utils.media import find_tool, frame_digits, frame_name, sanitize_filename


class TestFrameNaming:
    """Tests for zero-padded frame names."""

    def test_minimum_four_digits(self):
        assert frame_digits(1) == 4
        assert frame_digits(10000) == 4
        assert frame_name(7, 3, ".png") == "frame_0007.png"

    def test_widens_past_ten_thousand_frames(self):
        """10,001 frames need five digits for index 10000."""
        assert frame_digits(10001) == 5
        assert frame_name(0, 10001) == "frame_00000"
        assert frame_name(10000, 10001) == "frame_10000"

    def test_names_sort_lexicographically(self):
        total = 10500
        names = [frame_name(i, total, ".jpg") for i in (0, 9, 10, 999, 9999, 10499)]
        assert names == sorted(names)

    def test_suffix_lowercased(self):
        assert frame_name(1, 2, ".JPG") == "frame_0001.jpg"

    def test_zero_frames(self):
        assert frame_digits(0) == 4


class TestSanitizeFilename:

    def test_keeps_safe_names(self):
        assert sanitize_filename("beach-day_01.png") == "beach-day_01.png"

    def test_replaces_unsafe_characters(self):
        assert sanitize_filename("my photo (1).JPG") == "my_photo__1.jpg"

    def test_strips_directories(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"

    def test_empty_stem_falls_back(self):
        assert sanitize_filename("###.png") == "image.png"


class TestFindTool:

    def test_uses_path_lookup(self):
        with patch("slideshow.utils.media.shutil.which", return_value="/usr/bin/ffmpeg"):
            assert find_tool("ffmpeg") == Path("/usr/bin/ffmpeg")

    def test_returns_none_when_missing(self):
        with patch("slideshow.utils.media.shutil.which", return_value=None):
            assert find_tool("ffmpeg") is None

    def test_explicit_file_wins(self, tmp_path):
        binary = tmp_path / "my-ffmpeg"
        binary.write_text("#!/bin/sh\n")
        with patch("slideshow.utils.media.shutil.which", return_value="/usr/bin/ffmpeg"):
            assert find_tool("ffmpeg", str(binary)) == binary

    def test_explicit_name_looked_up_on_path(self):
        with patch("slideshow.utils.media.shutil.which", return_value=None) as which:
            assert find_tool("ffmpeg", "ffmpeg6") is None
        which.assert_called_once_with("ffmpeg6")
