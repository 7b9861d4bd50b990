"""Point capability for clustering raw color channels."""

from typing import Protocol

import numpy as np

RGB_CHANNELS = 3
RGBA_CHANNELS = 4


class MalformedPointsError(ValueError):
    """Points do not match the channel layout of their color space."""


class PointSpace(Protocol):
    """Interface for values the k-means engine can cluster.

    Points are rows of a ``(n, channels)`` array. Every method must accept a
    single point as well as a block of points so the engine can work on
    whole chunks at once.
    """

    channels: int

    def zero(self) -> np.ndarray:
        """Neutral accumulator value."""

    def distance(self, points: np.ndarray, other: np.ndarray) -> np.ndarray:
        """Distance from each point to ``other``."""

    def accumulate(self, total: np.ndarray, points: np.ndarray) -> np.ndarray:
        """Add one point or a block of points into an accumulator."""

    def mean(self, total: np.ndarray, count: int) -> np.ndarray:
        """Finalize an accumulator holding ``count`` points into a point."""


class EuclideanColorSpace:
    """Euclidean distance over raw 8-bit channel values, alpha included."""

    def __init__(self, channels: int) -> None:
        """Create a color space with a fixed channel count."""
        self.channels = channels

    def __repr__(self) -> str:
        return f"EuclideanColorSpace(channels={self.channels})"

    def zero(self) -> np.ndarray:
        """Wide accumulator so channel sums cannot overflow."""
        return np.zeros(self.channels, dtype=np.uint64)

    def distance(self, points: np.ndarray, other: np.ndarray) -> np.ndarray:
        """Euclidean distance, broadcasting over the leading axis."""
        diff = np.asarray(points, dtype=np.float64) - np.asarray(
            other, dtype=np.float64
        )
        return np.sqrt(np.sum(diff * diff, axis=-1))

    def accumulate(self, total: np.ndarray, points: np.ndarray) -> np.ndarray:
        """Sum channels of ``points`` into ``total``."""
        block = np.asarray(points).reshape(-1, self.channels)
        return total + block.sum(axis=0, dtype=np.uint64)

    def mean(self, total: np.ndarray, count: int) -> np.ndarray:
        """Integer mean, truncated toward zero like the channel type."""
        return (total // np.uint64(count)).astype(np.uint8)


RGB = EuclideanColorSpace(RGB_CHANNELS)
RGBA = EuclideanColorSpace(RGBA_CHANNELS)


def space_for(channels: int) -> EuclideanColorSpace:
    """Color space adapter for a channel layout."""
    if channels == RGB_CHANNELS:
        return RGB
    if channels == RGBA_CHANNELS:
        return RGBA
    msg = f"invalid color length {channels}. only rgb or rgba colors are supported"
    raise MalformedPointsError(msg)
