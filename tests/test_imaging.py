"""Unit tests for pixel extraction and quantized image output."""

import io

import numpy as np
import pytest
import requests
from PIL import Image

from kpalette import imaging


@pytest.fixture
def small_image():
    """3x2 image with a distinct color per pixel."""
    image = Image.new("RGB", (3, 2))
    for x in range(3):
        for y in range(2):
            image.putpixel((x, y), (x * 10, y * 10, 7))
    return image


class TestExtractPixels:
    def test_row_major_order(self, small_image):
        pixels = imaging.extract_pixels(small_image)
        assert pixels.shape == (6, 3)
        assert pixels.dtype == np.uint8
        assert pixels[:3].tolist() == [[0, 0, 7], [10, 0, 7], [20, 0, 7]]
        assert pixels[3].tolist() == [0, 10, 7]

    def test_alpha_channel(self, small_image):
        pixels = imaging.extract_pixels(small_image, alpha=True)
        assert pixels.shape == (6, 4)
        assert (pixels[:, 3] == 255).all()

    def test_converts_palette_images(self):
        image = Image.new("P", (2, 2))
        assert imaging.extract_pixels(image).shape == (4, 3)


class TestRenderQuantized:
    def test_replaces_pixels_with_centers(self):
        centers = np.array([[255, 0, 0], [0, 0, 255]], dtype=np.uint8)
        assignments = np.array([0, 1, 1, 0])
        image = imaging.render_quantized(centers, assignments, (2, 2))

        assert image.size == (2, 2)
        assert image.mode == "RGB"
        assert image.getpixel((0, 0)) == (255, 0, 0)
        assert image.getpixel((1, 0)) == (0, 0, 255)
        assert image.getpixel((0, 1)) == (0, 0, 255)

    def test_rgba_mode(self):
        centers = np.array([[1, 2, 3, 4]], dtype=np.uint8)
        image = imaging.render_quantized(centers, np.zeros(6, dtype=int), (3, 2))
        assert image.mode == "RGBA"
        assert image.getpixel((2, 1)) == (1, 2, 3, 4)

    def test_size_mismatch(self):
        centers = np.array([[0, 0, 0]], dtype=np.uint8)
        with pytest.raises(ValueError, match="does not match"):
            imaging.render_quantized(centers, np.zeros(5, dtype=int), (2, 2))

    def test_save_round_trip(self, tmp_path):
        centers = np.array([[10, 20, 30], [40, 50, 60]], dtype=np.uint8)
        output = tmp_path / "quantized.png"
        imaging.save_quantized(centers, np.array([0, 1, 0, 1, 0, 1]), (3, 2), output)

        with Image.open(output) as saved:
            assert saved.size == (3, 2)
            assert saved.getpixel((1, 0)) == (40, 50, 60)


class TestFormats:
    @pytest.mark.parametrize("path", ["out.png", "out.JPG", "dir/out.webp"])
    def test_image_paths(self, path):
        assert imaging.is_image_path(path)

    @pytest.mark.parametrize("path", ["palette.txt", "palette", "out.json"])
    def test_non_image_paths(self, path):
        assert not imaging.is_image_path(path)

    @pytest.mark.parametrize("path", ["a.jpg", "a.jpeg", "a.bmp", "a.ppm", "a.tiff"])
    def test_formats_without_alpha(self, path):
        assert not imaging.supports_alpha(path)

    @pytest.mark.parametrize("path", ["a.png", "a.webp"])
    def test_formats_with_alpha(self, path):
        assert imaging.supports_alpha(path)


class FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"status {self.status}")


class TestOpenImage:
    def test_local_file(self, tmp_path, small_image):
        path = tmp_path / "input.png"
        small_image.save(path)
        assert imaging.open_image(str(path)).size == (3, 2)

    def test_url(self, monkeypatch, small_image):
        buffer = io.BytesIO()
        small_image.save(buffer, format="PNG")
        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse(buffer.getvalue())

        monkeypatch.setattr(imaging.requests, "get", fake_get)
        image = imaging.open_image("https://example.com/image.png")

        assert image.size == (3, 2)
        assert calls == [("https://example.com/image.png", imaging.REQUEST_TIMEOUT_SECONDS)]

    def test_url_error(self, monkeypatch):
        monkeypatch.setattr(
            imaging.requests, "get", lambda url, timeout: FakeResponse(b"", 404)
        )
        with pytest.raises(requests.HTTPError):
            imaging.open_image("http://example.com/missing.png")
