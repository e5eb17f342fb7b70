"""Tests for the thumbnail generator."""

from PIL import Image

from summary_video.services.thumbnail_generator import THUMBNAIL_SIZE, ThumbnailGenerator

from conftest import solid


class TestThumbnail:

    def test_with_source_image(self, video, tmp_path):
        image = ThumbnailGenerator(output_dir=str(tmp_path)).render(video, 59.6, solid((200, 200, 200)))

        assert image.size == THUMBNAIL_SIZE
        # selo AI SUMMARY na cor primária
        r, g, b = image.getpixel((55, 55))
        assert b > r
        # fundo escurecido pelo overlay
        assert abs(image.getpixel((640, 400))[0] - 100) <= 1

    def test_fallback_gradient(self, video, tmp_path):
        image = ThumbnailGenerator(output_dir=str(tmp_path)).render(video, 60, None)

        assert image.size == THUMBNAIL_SIZE
        r, g, b = image.getpixel((2, 2))
        assert abs(r - 0x1E) <= 2 and abs(b - 0xAF) <= 2

    def test_generate_saves_jpeg(self, video, tmp_path):
        path = ThumbnailGenerator(output_dir=str(tmp_path)).generate(video, 60, None, job_id="job1")

        assert path.name == f"thumbnail_{video.id}_job1.jpg"
        with Image.open(path) as saved:
            assert saved.format == "JPEG"
            assert saved.size == THUMBNAIL_SIZE
