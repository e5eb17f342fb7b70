"""Tests for background image loading."""

import io

import httpx
from PIL import Image

from summary_video.models import AssetConfig, AssetLoadError
from summary_video.services.asset_loader import AssetLoader, release_images

from conftest import solid


def png_bytes(color=(0, 128, 0)) -> bytes:
    buffer = io.BytesIO()
    solid(color, (8, 8)).save(buffer, "PNG")
    return buffer.getvalue()


def make_loader(handler, max_attempts=2):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AssetLoader(AssetConfig(timeout_seconds=1, max_attempts=max_attempts), client=client)


class TestLocalFiles:

    async def test_loads_local_path(self, tmp_path):
        path = tmp_path / "thumb.png"
        path.write_bytes(png_bytes())

        outcome = await AssetLoader().load(str(path))

        assert outcome.ok
        assert outcome.value.mode == "RGB"
        assert outcome.value.getpixel((0, 0)) == (0, 128, 0)

    async def test_file_uri(self, tmp_path):
        path = tmp_path / "thumb.png"
        path.write_bytes(png_bytes())

        assert (await AssetLoader().load(path.as_uri())).ok

    async def test_missing_file(self, tmp_path):
        outcome = await AssetLoader().load(str(tmp_path / "nope.png"))

        assert not outcome.ok
        assert isinstance(outcome.error, AssetLoadError)

    async def test_invalid_image(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")

        outcome = await AssetLoader().load(str(path))

        assert "invalid image" in outcome.error.reason


class TestRemote:

    async def test_downloads_image(self):
        loader = make_loader(lambda request: httpx.Response(200, content=png_bytes()))
        outcome = await loader.load("https://img.example.com/a.jpg")
        assert outcome.ok

    async def test_http_error_is_reported(self):
        loader = make_loader(lambda request: httpx.Response(404))
        outcome = await loader.load("https://img.example.com/a.jpg")

        assert outcome.error.reason == "HTTP 404"

    async def test_transport_errors_are_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, content=png_bytes())

        outcome = await make_loader(handler).load("https://img.example.com/a.jpg")

        assert outcome.ok
        assert len(calls) == 2


class TestLoadAll:

    async def test_failures_map_to_none(self, tmp_path):
        good = tmp_path / "good.png"
        good.write_bytes(png_bytes())
        missing = str(tmp_path / "missing.png")

        images = await AssetLoader().load_all([str(good), missing, str(good), ""])

        assert list(images) == [str(good), missing]
        assert isinstance(images[str(good)], Image.Image)
        assert images[missing] is None

    def test_release_images_skips_failures(self):
        closed = []
        image = solid((0, 0, 0), (4, 4))
        image.close = lambda: closed.append("a")

        release_images({"a": image, "b": None})
        release_images(None)

        assert closed == ["a"]
