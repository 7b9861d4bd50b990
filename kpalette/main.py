"""Entry point and command line interface for kpalette."""

import argparse
import contextlib
import logging
import sys
from pathlib import Path

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from . import imaging
from .config import (
    DEFAULT_COLOR_COUNT,
    DEFAULT_ITERATIONS,
    DEFAULT_JOBS,
    ClusterSettings,
    derive_seed,
)
from .kmeans import InvalidConfigurationError, cluster
from .palette import ColorCodeFormat, write_palette
from .progress import NullProgress, ProgressObserver, TerminalProgress

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog="kpalette",
        description=(
            "Quantization/palette-generation tool using k-means clustering "
            "on pixel data"
        ),
    )

    parser.add_argument("input", help="Path to image file or URL")
    parser.add_argument(
        "output_positional",
        nargs="?",
        metavar="output",
        help="Output file path (same as --output)",
    )
    parser.add_argument(
        "-k",
        dest="n_colors",
        type=int,
        default=DEFAULT_COLOR_COUNT,
        metavar="count",
        help=f"Number of colors to quantize to (default: {DEFAULT_COLOR_COUNT})",
    )
    parser.add_argument(
        "-n",
        dest="iterations",
        type=int,
        default=DEFAULT_ITERATIONS,
        metavar="count",
        help=f"Number of k-means iterations to perform (default: {DEFAULT_ITERATIONS})",
    )
    parser.add_argument(
        "-a",
        "--with-alpha",
        dest="alpha",
        action="store_true",
        help="Include alpha channel",
    )
    parser.add_argument(
        "-s",
        "--seed",
        type=int,
        metavar="number",
        help="Optional RNG seed for reproducible results",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="output",
        help=(
            "Output file path. If not provided, outputs to stdout. "
            "With image file extensions, outputs an image file"
        ),
    )
    parser.add_argument(
        "-f",
        "--format",
        type=ColorCodeFormat,
        choices=list(ColorCodeFormat),
        metavar="fmt",
        help="Palette output format: hex or rgb (default: hex)",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=DEFAULT_JOBS,
        metavar="count",
        help=f"Number of worker threads (default: {DEFAULT_JOBS})",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Open the interactive terminal preview",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Do not report progress"
    )
    parser.add_argument("--version", action="version", version="kpalette 1.0.0")
    return parser


def validate_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Reject option combinations that cannot produce a sensible output."""
    if args.output and args.output_positional:
        parser.error("argument -o/--output: not allowed with a positional output")
    output = args.output or args.output_positional

    if args.preview and output:
        parser.error("cannot write an output file together with --preview")

    if args.format is not None and output and imaging.is_image_path(output):
        parser.error("cannot specify color-code format when outputting an image file.")

    if args.alpha and output and imaging.is_image_path(output):
        if not imaging.supports_alpha(output):
            fmt = imaging.image_format(output)
            parser.error(f"the `{fmt}` image format does not support alpha.")

    try:
        args.settings = ClusterSettings(
            n_colors=args.n_colors,
            iterations=args.iterations,
            seed=args.seed if args.seed is not None else derive_seed(),
            alpha=args.alpha,
            jobs=args.jobs,
        )
    except ValueError as e:
        parser.error(str(e))


def make_observer(*, quiet: bool) -> ProgressObserver:
    """Progress on stderr when it is a terminal."""
    if quiet or not sys.stderr.isatty():
        return NullProgress()
    return TerminalProgress(sys.stderr)


def run(args: argparse.Namespace) -> None:
    """Cluster the input image and write the requested output."""
    settings: ClusterSettings = args.settings
    output = args.output or args.output_positional

    try:
        image = imaging.open_image(args.input)
    except (requests.RequestException, OSError, UnidentifiedImageError):
        logger.exception("Error: could not open image '%s'.", args.input)
        sys.exit(1)

    if args.preview:
        launch_preview(args.input, image, settings)
        return

    pixels = imaging.extract_pixels(image, alpha=settings.alpha)
    logger.info(
        "Clustering %d pixels into %d colors (seed %d)",
        len(pixels),
        settings.n_colors,
        settings.seed,
    )

    try:
        centers, assignments = cluster(
            pixels,
            settings.n_colors,
            settings.iterations,
            settings.seed,
            observer=make_observer(quiet=args.quiet),
            jobs=settings.jobs,
        )
    except InvalidConfigurationError:
        logger.exception("Error: invalid clustering configuration.")
        sys.exit(1)

    fmt = args.format or ColorCodeFormat.HEX
    if output is None:
        write_palette(centers, sys.stdout, fmt)
    elif imaging.is_image_path(output):
        save_image(centers, assignments, image.size, output)
    else:
        save_palette(centers, output, fmt)


def save_palette(centers: np.ndarray, output: str, fmt: ColorCodeFormat) -> None:
    """Write the palette to a text file, exiting on failure."""
    try:
        with Path(output).open("w") as f:
            write_palette(centers, f, fmt)
    except OSError:
        logger.exception("Error: failed to write palette to '%s'.", output)
        sys.exit(1)
    logger.info("Saved palette to %s", output)


def save_image(
    centers: np.ndarray,
    assignments: np.ndarray,
    size: tuple[int, int],
    output: str,
) -> None:
    """Write the quantized image, exiting on failure."""
    try:
        imaging.save_quantized(centers, assignments, size, output)
    except (OSError, ValueError):
        logger.exception(
            "Error: failed to save quantized image to '%s'. "
            "Check that the output format supports the color mode.",
            output,
        )
        sys.exit(1)


def launch_preview(source: str, image: Image.Image, settings: ClusterSettings) -> None:
    """Open the interactive preview."""
    from .launcher import launch_application  # noqa: PLC0415

    with contextlib.suppress(KeyboardInterrupt):
        launch_application(source, image, settings)


def main(argv: list[str] | None = None) -> None:
    """Run the kpalette command line tool."""
    parser = build_parser()
    args = parser.parse_args(argv)

    source = args.input
    if not imaging.is_url(source) and not Path(source).exists():
        logger.error("Error: Image path '%s' does not exist.", source)
        sys.exit(1)

    validate_args(parser, args)
    run(args)


if __name__ == "__main__":
    main()
