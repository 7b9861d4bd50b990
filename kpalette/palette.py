"""Palette output: sorting and formatting color codes."""

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import TextIO

import numpy as np

DARK_THRESHOLD = 128
RESET = "\x1b[0m"


class ColorCodeFormat(str, Enum):
    """Color code output format."""

    HEX = "hex"
    RGB = "rgb"

    def __str__(self) -> str:
        return self.value


def brightness(color: Sequence[int]) -> int:
    """Perceived brightness (luma) of an rgb or rgba color."""
    r, g, b = (np.float32(c) for c in color[:3])
    # computed in single precision; the truncated value depends on it
    return int(np.float32(0.299) * r + np.float32(0.587) * g + np.float32(0.114) * b)


def _packed_rgb(color: Sequence[int]) -> int:
    r, g, b = (int(c) for c in color[:3])
    return (r << 16) | (g << 8) | b


def sort_palette(centers: Iterable[Sequence[int]]) -> list[tuple[int, ...]]:
    """Sort colors by descending brightness, then by ascending rgb value."""
    colors = [tuple(int(c) for c in color) for color in centers]
    return sorted(colors, key=lambda c: (-brightness(c), _packed_rgb(c)))


def format_color(color: Sequence[int], fmt: ColorCodeFormat) -> str:
    """Color code without terminal escapes; alpha is included when present."""
    channels = [int(c) for c in color]
    if fmt == ColorCodeFormat.HEX:
        return "#" + "".join(f"{c:02x}" for c in channels)
    if len(channels) == 4:  # noqa: PLR2004
        return "rgba({}, {}, {}, {})".format(*channels)
    return "rgb({}, {}, {})".format(*channels)


def colorize(text: str, color: Sequence[int]) -> str:
    """Wrap text in ANSI codes showing the color as its background."""
    r, g, b = (int(c) for c in color[:3])
    # keep the text readable on the colored background
    fg = "255;255;255" if brightness(color) < DARK_THRESHOLD else "0;0;0"
    return f"\x1b[38;2;{fg}m\x1b[48;2;{r};{g};{b}m{text}{RESET}"


def write_palette(
    centers: np.ndarray | Iterable[Sequence[int]],
    stream: TextIO,
    fmt: ColorCodeFormat = ColorCodeFormat.HEX,
    *,
    colored: bool | None = None,
) -> None:
    """Write the sorted palette, one color code per line.

    Colors are previewed with ANSI escapes when ``stream`` is a terminal,
    unless ``colored`` says otherwise.
    """
    if colored is None:
        colored = stream.isatty()

    for color in sort_palette(centers):
        code = format_color(color, fmt)
        stream.write((colorize(code, color) if colored else code) + "\n")
