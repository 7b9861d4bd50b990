"""Image loading, pixel extraction and quantized image output."""

import logging
from io import BytesIO
from pathlib import Path

import numpy as np
import requests
from PIL import Image

REQUEST_TIMEOUT_SECONDS = 30
NO_ALPHA_FORMATS = frozenset({"JPEG", "BMP", "PPM", "TIFF"})

logger = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    """Whether the source should be fetched over HTTP."""
    return source.startswith(("http://", "https://"))


def open_image(source: str) -> Image.Image:
    """Open an image from a local path or an http(s) URL."""
    if is_url(source):
        logger.info("Downloading image from %s", source)
        response = requests.get(source, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        image = Image.open(BytesIO(response.content))
    else:
        image = Image.open(source)
    image.load()
    return image


def extract_pixels(image: Image.Image, *, alpha: bool = False) -> np.ndarray:
    """Pixel colors as an ``(n, 3)`` or ``(n, 4)`` uint8 array in row-major order."""
    mode = "RGBA" if alpha else "RGB"
    if image.mode != mode:
        image = image.convert(mode)
    array = np.asarray(image, dtype=np.uint8)
    return array.reshape(-1, len(mode))


def image_format(path: str | Path) -> str | None:
    """Pillow format name registered for the file extension, if any."""
    return Image.registered_extensions().get(Path(path).suffix.lower())


def is_image_path(path: str | Path) -> bool:
    """Whether the extension names an image format Pillow can write."""
    fmt = image_format(path)
    return fmt is not None and fmt in Image.SAVE


def supports_alpha(path: str | Path) -> bool:
    """Whether the image format for ``path`` keeps an alpha channel."""
    return image_format(path) not in NO_ALPHA_FORMATS


def render_quantized(
    centers: np.ndarray,
    assignments: np.ndarray,
    size: tuple[int, int],
) -> Image.Image:
    """Rebuild an image replacing every pixel with its cluster center."""
    width, height = size
    if len(assignments) != width * height:
        msg = (
            f"image size {width}x{height} does not match "
            f"{len(assignments)} assigned pixels"
        )
        raise ValueError(msg)

    centers = np.asarray(centers, dtype=np.uint8)
    channels = centers.shape[1]
    quantized = centers[assignments].reshape(height, width, channels)
    return Image.fromarray(quantized)


def save_quantized(
    centers: np.ndarray,
    assignments: np.ndarray,
    size: tuple[int, int],
    output: str | Path,
) -> Image.Image:
    """Render the quantized image and save it, inferring the format from ``output``."""
    image = render_quantized(centers, assignments, size)
    image.save(output)
    logger.info("Saved quantized image to %s", output)
    return image
