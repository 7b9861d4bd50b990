"""Application launcher for the interactive palette preview."""

from PIL import Image

from .components.app import App
from .config import ClusterSettings


def launch_application(
    source: str,
    image: Image.Image,
    settings: ClusterSettings,
) -> None:
    """Launch the palette preview interface.

    Args:
        source: Path or URL the image was loaded from
        image: The decoded source image
        settings: Initial clustering settings

    """
    app = App(source, image, settings)
    app.run()
