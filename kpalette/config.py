"""Clustering settings and defaults."""

import os
import time
from dataclasses import dataclass, replace

DEFAULT_COLOR_COUNT = 8
DEFAULT_ITERATIONS = 5
DEFAULT_ALPHA = False
DEFAULT_JOBS = os.cpu_count() or 1

SEED_MASK = (1 << 64) - 1


def derive_seed() -> int:
    """Seed from the current time: milliseconds since the epoch, low 64 bits."""
    return time.time_ns() // 1_000_000 & SEED_MASK


@dataclass(frozen=True)
class ClusterSettings:
    """
    Parameters for one clustering run.

    Attributes:
        n_colors: Number of palette colors (clusters)
        iterations: Number of k-means iterations to run
        seed: Seed for the initial center selection
        alpha: Cluster RGBA instead of RGB
        jobs: Worker threads used by the engine

    """

    n_colors: int = DEFAULT_COLOR_COUNT
    iterations: int = DEFAULT_ITERATIONS
    seed: int = 0
    alpha: bool = DEFAULT_ALPHA
    jobs: int = DEFAULT_JOBS

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.n_colors < 1:
            msg = f"n_colors must be >= 1, got {self.n_colors}"
            raise ValueError(msg)
        if self.iterations < 0:
            msg = f"iterations must be >= 0, got {self.iterations}"
            raise ValueError(msg)
        if not 0 <= self.seed <= SEED_MASK:
            msg = f"seed must fit in an unsigned 64-bit integer, got {self.seed}"
            raise ValueError(msg)
        if self.jobs < 1:
            msg = f"jobs must be >= 1, got {self.jobs}"
            raise ValueError(msg)

    def with_seed(self, seed: int) -> "ClusterSettings":
        """Copy of these settings with another seed."""
        return replace(self, seed=seed)

    def cache_key(self) -> str:
        """Key identifying the clustering result these settings produce."""
        # jobs never changes the result
        return f"kmeans_{self.n_colors}_{self.iterations}_{self.seed}_{self.alpha}"
