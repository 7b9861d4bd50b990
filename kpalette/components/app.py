"""Main application component for the palette preview."""

import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import numpy as np
import pyperclipimg
from PIL import Image
from textual.app import App as TextualApp
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import Button, Footer, Header, Static
from textual_slider import Slider

from kpalette import imaging
from kpalette.colors import MalformedPointsError
from kpalette.config import ClusterSettings, derive_seed
from kpalette.kmeans import InvalidConfigurationError, cluster
from kpalette.utils.cache import ClusterResult, ResultCache

from .preview import Preview
from .settings import Settings
from .swatches import Swatches

NOTIFICATION_TIMEOUT_SECONDS = 2


class AppProgress:
    """Forwards engine progress from the worker thread to the progress bar."""

    def __init__(self, app: "App", iterations: int) -> None:
        self.app = app
        self.iterations = max(iterations, 1)
        self.iteration = 0

    def _update(self, progress: float) -> None:
        self.app.call_from_thread(self.app.update_progress, progress, self.iterations)

    def on_iteration(self, index: int, total: int) -> None:  # noqa: ARG002
        self.iteration = index - 1
        self._update(self.iteration)

    def on_assignment(self, done: int, total: int) -> None:
        self._update(self.iteration + done / total)

    def on_finish(self) -> None:
        self._update(self.iterations)


class App(TextualApp):
    """Interactive k-means palette preview."""

    CSS = """
    Screen {
        layout: horizontal;
    }

    #left-panel {
        width: 35;
        min-width: 30;
        max-width: 40;
        border: solid $primary;
    }

    .pane-title {
        height: 1;
        margin: 0 1;
        text-align: center;
        background: $surface;
    }

    #right-panel {
        width: 1fr;
        min-width: 80;
        border: solid $success;
    }

    #palette-list {
        height: 1fr;
        margin: 0 1;
    }

    #image-preview {
        height: 1fr;
        padding: 0;
    }

    #image-container {
        height: 1fr;
        border: solid $secondary;
        margin: 0;
        align: center middle;
        overflow: hidden;
    }

    #progress {
        height: 1;
        margin: 0 1;
    }

    #settings-panel {
        height: 13;
        border: solid $accent;
        margin: 0;
        padding: 1;
        overflow-y: auto;
    }

    .parameter-controls-row {
        height: 6;
        content-align: center middle;
    }

    .parameter-control-group {
        width: 1fr;
        max-width: 40;
        padding: 0 1;
    }

    .parameter-label {
        height: 1;
        margin-bottom: 1;
        text-align: center;
    }

    .action-controls-section {
        height: 3;
        content-align: center middle;
    }

    #alpha-checkbox {
        width: 1fr;
    }

    .action-controls-section > Button {
        width: 1fr;
        min-height: 2;
        margin: 0 1;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("s", "save", "Save"),
        ("c", "copy", "Copy"),
        ("r", "reseed", "Reseed"),
        ("ctrl+c", "quit", "Quit"),
        ("1", "focus_palette", "Palette"),
        ("2", "focus_settings", "Settings"),
    ]

    def __init__(
        self,
        source: str,
        image: Image.Image,
        settings: ClusterSettings,
    ) -> None:
        """Initialize the app."""
        self.source = source
        self.original_image = image
        self.cluster_settings = settings
        self.result_cache = ResultCache()
        self.executor = ThreadPoolExecutor(max_workers=1)
        self.processing_lock = threading.Lock()
        self.pending_key: str | None = None
        super().__init__()

    def compose(self) -> ComposeResult:
        """Create the UI layout."""
        yield Header()

        with Horizontal():
            with Container(id="left-panel"):
                yield Static("[bold]1[/bold] Palette", classes="pane-title")
                yield Swatches(id="palette-list")

            with Container(id="right-panel"):
                yield Preview(id="image-preview")
                yield Static("[bold]2[/bold] Settings", classes="pane-title")
                yield Settings(self.cluster_settings, id="settings-panel")

        yield Footer()

    def on_mount(self) -> None:
        """Start the first clustering run."""
        self.title = f"kpalette - {Path(self.source).name}"
        self.process(self.cluster_settings)
        self.query_one("#palette-list", Swatches).focus()

    def process(self, settings: ClusterSettings) -> None:
        """Show the result for ``settings``, clustering in the background if needed."""
        self.cluster_settings = settings
        key = settings.cache_key()
        cached = self.result_cache.get(key)
        if cached is not None:
            # a run still in flight must not replace this result
            with self.processing_lock:
                self.pending_key = None
            self.show_result(settings, cached)
            return

        with self.processing_lock:
            self.pending_key = key

        self.sub_title = f"clustering into {settings.n_colors} colors..."
        self.executor.submit(self._cluster_background, settings)

    def _cluster_background(self, settings: ClusterSettings) -> None:
        """Run the engine in the worker thread."""
        try:
            pixels = imaging.extract_pixels(self.original_image, alpha=settings.alpha)
            result = cluster(
                pixels,
                settings.n_colors,
                settings.iterations,
                settings.seed,
                observer=AppProgress(self, settings.iterations),
                jobs=settings.jobs,
            )
        except (InvalidConfigurationError, MalformedPointsError) as e:
            self.call_from_thread(
                self.notify, f"Cannot cluster image: {e}", severity="error"
            )
            return

        self.call_from_thread(self._update_result, settings, result)

    def _update_result(self, settings: ClusterSettings, result: ClusterResult) -> None:
        """Update cache and preview on main thread."""
        key = settings.cache_key()
        self.result_cache.put(key, result)
        # only show the result if no newer run was requested meanwhile
        with self.processing_lock:
            if self.pending_key == key:
                self.show_result(settings, result)
                self.pending_key = None

    def show_result(self, settings: ClusterSettings, result: ClusterResult) -> None:
        """Render a clustering result into the preview and palette list."""
        centers, assignments = result
        image = imaging.render_quantized(
            centers, assignments, self.original_image.size
        )
        title = f"{settings.n_colors} colors, seed {settings.seed}"
        self.query_one("#image-preview", Preview).update_image(title, image)
        self.query_one("#palette-list", Swatches).set_palette(
            np.asarray(centers), np.asarray(assignments)
        )
        self.sub_title = title

    def update_progress(self, progress: float, total: float) -> None:
        """Move the progress bar of the preview."""
        self.query_one("#image-preview", Preview).update_progress(progress, total)

    def on_slider_changed(self, _event: Slider.Changed) -> None:
        """Handle slider value changes - only update labels."""
        self.query_one("#settings-panel", Settings).update_labels()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button presses."""
        panel = self.query_one("#settings-panel", Settings)
        if event.button.id == "apply-settings-button":
            self.process(panel.apply_to(self.cluster_settings))
            self.notify(
                "Configuration applied", timeout=NOTIFICATION_TIMEOUT_SECONDS
            )
        elif event.button.id == "reset-defaults-button":
            panel.reset_defaults()
            self.notify(
                "Settings restored to default values",
                timeout=NOTIFICATION_TIMEOUT_SECONDS,
            )

    def output_filename(self) -> str:
        """File name for saving the current preview."""
        stem = Path(self.source).stem or "image"
        settings = self.cluster_settings
        return f"{stem}_k{settings.n_colors}_s{settings.seed}.png"

    def action_save(self) -> None:
        """Save the current quantized image to a PNG file."""
        preview = self.query_one("#image-preview", Preview)
        if preview.current_image:
            filename = self.output_filename()
            try:
                preview.current_image.save(filename)
                self.notify(f"Saved as {filename}", severity="information")
            except OSError as e:
                self.notify(f"Error saving: {e}", severity="error")

    def action_copy(self) -> None:
        """Copy the current quantized image to the system clipboard."""
        preview = self.query_one("#image-preview", Preview)
        if preview.current_image:
            try:
                pyperclipimg.copy(preview.current_image)
                self.notify("Copied to clipboard!", severity="information")
            except Exception as e:  # noqa: BLE001
                self.notify(f"Copy failed: {e}", severity="error")

    def action_reseed(self) -> None:
        """Cluster again from a new random seed."""
        self.process(self.cluster_settings.with_seed(derive_seed()))

    def action_focus_palette(self) -> None:
        """Focus the palette list (1)."""
        self.query_one("#palette-list", Swatches).focus()

    def action_focus_settings(self) -> None:
        """Focus the settings panel (2)."""
        self.query_one("#color-count-control", Slider).focus()

    def on_unmount(self) -> None:
        """Clean up resources when app is unmounted."""
        self.executor.shutdown(wait=False, cancel_futures=True)
