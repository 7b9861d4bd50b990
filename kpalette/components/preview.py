"""Image preview component for displaying quantized images."""

from typing import Any

from PIL import Image
from textual.app import ComposeResult
from textual.containers import Container, Vertical
from textual.widgets import ProgressBar, Static
from textual_image.widget import Image as ImageWidget

MAX_IMAGE_WIDTH = 1200
MAX_IMAGE_HEIGHT = 800


class Preview(Container):
    """Quantized image preview with clustering progress."""

    def __init__(self, **kwargs) -> None:  # noqa: ANN003
        self.current_image: Image.Image | None = None
        self.current_image_widget: Any = None
        self.current_title = ""
        super().__init__(**kwargs)

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("", id="image-title", classes="pane-title")
            with Container(id="image-container", classes="image-main"):
                pass
            yield ProgressBar(id="progress", show_eta=False)

    def update_image(self, title: str, image: Image.Image) -> None:
        """Show a new image; the full-size image is kept for saving."""
        self.current_image = image
        self.current_title = title
        self.query_one("#image-title", Static).update(title)

        image_container = self.query_one("#image-container", Container)
        image_container.remove_children()
        self.current_image_widget = None

        try:
            thumbnail = image.copy()
            thumbnail.thumbnail(
                (MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT), Image.Resampling.LANCZOS
            )
            self.current_image_widget = ImageWidget(thumbnail)
            # one auto dimension keeps the aspect ratio
            self.current_image_widget.styles.width = "auto"
            self.current_image_widget.styles.height = "100%"
            image_container.mount(self.current_image_widget)
        except Exception as e:  # noqa: BLE001
            error_details = (
                f"Image: {image.size[0]}x{image.size[1]} pixels\n"
                f"Mode: {image.mode}\nError: {e!s}"
            )
            image_container.mount(Static(error_details))

    def update_progress(self, progress: float, total: float) -> None:
        """Move the progress bar."""
        self.query_one("#progress", ProgressBar).update(
            total=total, progress=progress
        )
