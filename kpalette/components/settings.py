"""Settings panel for k-means parameters."""

from dataclasses import replace
from typing import Any

from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Checkbox, Label
from textual_slider import Slider

from kpalette.config import (
    DEFAULT_ALPHA,
    DEFAULT_COLOR_COUNT,
    DEFAULT_ITERATIONS,
    ClusterSettings,
)

MIN_COLOR_COUNT = 1
MAX_COLOR_COUNT = 32
MIN_ITERATIONS = 1
MAX_ITERATIONS = 50


class Settings(Container):
    """K-means settings panel."""

    def __init__(self, settings: ClusterSettings, **kwargs) -> None:  # noqa: ANN003
        """Set up settings panel from the initial settings."""
        self.color_count = settings.n_colors
        self.iterations = settings.iterations
        self.alpha = settings.alpha
        super().__init__(**kwargs)

    def compose(self) -> ComposeResult:
        """Build the k-means settings UI."""
        with Vertical():
            with Horizontal(classes="parameter-controls-row"):
                with Container(classes="parameter-control-group"):
                    yield Label("Color Count", classes="parameter-label")
                    yield Slider(
                        min=MIN_COLOR_COUNT,
                        max=MAX_COLOR_COUNT,
                        value=min(self.color_count, MAX_COLOR_COUNT),
                        step=1,
                        id="color-count-control",
                    )
                    yield Label(f"{self.color_count} colors", id="color-count-value")

                with Container(classes="parameter-control-group"):
                    yield Label("Iterations", classes="parameter-label")
                    yield Slider(
                        min=MIN_ITERATIONS,
                        max=MAX_ITERATIONS,
                        value=min(max(self.iterations, MIN_ITERATIONS), MAX_ITERATIONS),
                        step=1,
                        id="iterations-control",
                    )
                    yield Label(f"{self.iterations}", id="iterations-value")

            with Horizontal(classes="action-controls-section"):
                yield Checkbox("Alpha Channel", self.alpha, id="alpha-checkbox")
                yield Button("Apply", id="apply-settings-button", variant="primary")
                yield Button("Reset", id="reset-defaults-button", variant="default")

    def get_parameters(self) -> dict[str, Any]:
        """Get current parameter values from UI."""
        color_slider = self.query_one("#color-count-control", Slider)
        iter_slider = self.query_one("#iterations-control", Slider)
        alpha_checkbox = self.query_one("#alpha-checkbox", Checkbox)

        return {
            "n_colors": int(color_slider.value),
            "iterations": int(iter_slider.value),
            "alpha": alpha_checkbox.value,
        }

    def apply_to(self, settings: ClusterSettings) -> ClusterSettings:
        """Settings with the values currently shown in the UI."""
        return replace(settings, **self.get_parameters())

    def set_parameters(self, **kwargs) -> None:  # noqa: ANN003
        """Set parameter values in UI."""
        if "n_colors" in kwargs:
            self.color_count = kwargs["n_colors"]
            self.query_one("#color-count-control", Slider).value = kwargs["n_colors"]
            self.update_labels()

        if "iterations" in kwargs:
            self.iterations = kwargs["iterations"]
            self.query_one("#iterations-control", Slider).value = kwargs["iterations"]
            self.update_labels()

        if "alpha" in kwargs:
            self.alpha = kwargs["alpha"]
            self.query_one("#alpha-checkbox", Checkbox).value = kwargs["alpha"]

    def update_labels(self) -> None:
        """Show the current slider values next to the sliders."""
        color_count = int(self.query_one("#color-count-control", Slider).value)
        iterations = int(self.query_one("#iterations-control", Slider).value)
        self.query_one("#color-count-value", Label).update(f"{color_count} colors")
        self.query_one("#iterations-value", Label).update(f"{iterations}")

    def reset_defaults(self) -> None:
        """Reset all parameters to default values."""
        self.set_parameters(
            n_colors=DEFAULT_COLOR_COUNT,
            iterations=DEFAULT_ITERATIONS,
            alpha=DEFAULT_ALPHA,
        )
