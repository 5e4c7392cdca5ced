"""End-to-end generation with a real ffmpeg binary.

Skipped when ffmpeg/ffprobe are not installed or Pillow is missing.
"""

import io

import pytest

from slideshow.models.domain import ProjectStatus
from slideshow.services.encoder import FFmpegEncoder
from slideshow.services.errors import EncodeFailedError
from slideshow.services.generation_service import GenerationService
from slideshow.services.video_service import VideoService
from slideshow.utils.media import find_tool

Image = pytest.importorskip("PIL.Image")

pytestmark = pytest.mark.skipif(
    find_tool("ffmpeg") is None or find_tool("ffprobe") is None,
    reason="ffmpeg/ffprobe not installed",
)


def png_bytes(size, color):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def jpeg_bytes(size, color):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def ffmpeg_service(project_repo, store, settings):
    encoder = FFmpegEncoder(settings, str(find_tool("ffmpeg")))
    return GenerationService(project_repo, store, encoder, settings)


class TestFFmpegGeneration:

    def test_mixed_sizes_produce_expected_video(self, ffmpeg_service, make_project, store, settings):
        """3 differently sized images at 2.5s / 24 fps give a 7.5s video at the target size."""
        project = make_project(
            [
                ("wide.png", png_bytes((640, 200), "red"), 0),
                ("tall.jpg", jpeg_bytes((100, 500), "green"), 1),
                ("odd.png", png_bytes((333, 217), "blue"), 2),
            ],
            duration_per_image=2.5,
            fps=24,
        )

        result = ffmpeg_service.generate(project.id)

        assert result.status == ProjectStatus.COMPLETED
        info = VideoService(str(find_tool("ffprobe"))).get_video_info(store.resolve(result.output_path))
        assert info["duration"] == pytest.approx(7.5, abs=0.1)
        assert info["fps"] == pytest.approx(24, abs=0.01)
        assert info["resolution"] == [settings.width, settings.height]
        assert info["frame_count"] == pytest.approx(180, abs=2)
        assert list(settings.staging_root.iterdir()) == []

    def test_unreadable_image_fails_encode(self, ffmpeg_service, make_project, project_repo, store):
        """A corrupt image makes ffmpeg exit non-zero; no output is left behind."""
        project = make_project([("broken.png", b"definitely not a png", 0)])

        with pytest.raises(EncodeFailedError) as exc_info:
            ffmpeg_service.generate(project.id)

        assert exc_info.value.exit_code not in (None, 0)
        assert project_repo.get(project.id).status == ProjectStatus.FAILED
        assert store.listdir("videos") == []
