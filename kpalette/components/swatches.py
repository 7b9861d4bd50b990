"""Palette list component showing the clustered colors."""

from collections.abc import Sequence

import numpy as np
from textual.widgets import OptionList
from textual.widgets.option_list import Option

from kpalette.palette import ColorCodeFormat, format_color, sort_palette


def create_swatch_display(color: Sequence[int], share: float) -> str:
    """Make colored text display for one palette color."""
    r, g, b = (int(c) for c in color[:3])
    code = format_color(color, ColorCodeFormat.HEX)
    return f"[rgb({r},{g},{b})]██████[/] {code} {share:6.1%}"


def palette_shares(
    centers: np.ndarray, assignments: np.ndarray
) -> dict[tuple[int, ...], float]:
    """Fraction of pixels assigned to each center color."""
    counts = np.bincount(assignments, minlength=len(centers))
    total = max(len(assignments), 1)
    shares: dict[tuple[int, ...], float] = {}
    for center, count in zip(centers, counts, strict=True):
        key = tuple(int(c) for c in center)
        # identical centers share one swatch
        shares[key] = shares.get(key, 0.0) + count / total
    return shares


class Swatches(OptionList):
    """Palette list with vim-like navigation."""

    BINDINGS = [
        ("k,up", "cursor_up", "Up"),
        ("j,down", "cursor_down", "Down"),
        ("g", "go_to_first", "Go first"),
        ("G", "go_to_last", "Go last"),
    ]

    def __init__(self, **kwargs) -> None:  # noqa: ANN003
        """Init palette list widget."""
        self.colors: list[tuple[int, ...]] = []
        super().__init__(**kwargs)

    def set_palette(self, centers: np.ndarray, assignments: np.ndarray) -> None:
        """Replace the listed colors with a new clustering result."""
        shares = palette_shares(centers, assignments)
        self.colors = sort_palette(shares)
        self.clear_options()
        for color in self.colors:
            self.add_option(
                Option(create_swatch_display(color, shares[color]), id=str(color))
            )

    def action_go_to_first(self) -> None:
        """Go to first color."""
        if self.option_count > 0:
            self.highlighted = 0

    def action_go_to_last(self) -> None:
        """Go to last color."""
        if self.option_count > 0:
            self.highlighted = self.option_count - 1
