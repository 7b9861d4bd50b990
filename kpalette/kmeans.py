"""K-means clustering engine for color points."""

import logging
from collections.abc import Iterator
from concurrent.futures import Executor, ThreadPoolExecutor

import numpy as np
from numpy.typing import ArrayLike

from .colors import MalformedPointsError, PointSpace, space_for
from .progress import NullProgress, ProgressObserver

CHUNK_SIZE = 65536

logger = logging.getLogger(__name__)


class InvalidConfigurationError(ValueError):
    """Cluster count, iteration budget or seed cannot be used with the input."""


def sample_indices(n: int, k: int, seed: int) -> np.ndarray:
    """Draw ``k`` distinct indices from ``range(n)`` by partial Fisher-Yates shuffle.

    The same ``(n, k, seed)`` always yields the same indices in the same order.
    """
    rng = np.random.default_rng(seed)
    indices = np.arange(n)
    for i in range(k):
        j = int(rng.integers(i, n))
        indices[i], indices[j] = indices[j], indices[i]
    return indices[:k].copy()


def center_distances(
    centers: np.ndarray,
    space: PointSpace,
    executor: Executor | None = None,
) -> np.ndarray:
    """Pairwise center distances, filled for ``i < j`` only."""
    k = len(centers)
    table = np.zeros((k, k), dtype=np.float64)

    def row(i: int) -> np.ndarray:
        return space.distance(centers[i + 1 :], centers[i])

    rows = executor.map(row, range(k)) if executor else map(row, range(k))
    for i, distances in enumerate(rows):
        table[i, i + 1 :] = distances
    return table


def assign(
    points: np.ndarray,
    centers: np.ndarray,
    space: PointSpace,
    table: np.ndarray | None = None,
) -> np.ndarray:
    """Index of the nearest center for every point.

    Centers are scanned in index order and only a strictly smaller distance
    replaces the current best, so ties resolve to the lowest index. When
    ``table`` (from :func:`center_distances`) is given, center ``j`` is skipped
    for every point whose best center ``b`` has ``table[b, j] >= 2 * best``:
    by the triangle inequality ``j`` cannot be strictly closer.
    """
    best_idx = np.zeros(len(points), dtype=np.intp)
    best_dist = np.asarray(space.distance(points, centers[0]), dtype=np.float64)

    for j in range(1, len(centers)):
        if table is None:
            candidates = np.arange(len(points))
        else:
            # best_idx < j always holds here, so only the upper triangle is read
            candidates = np.flatnonzero(table[best_idx, j] < 2.0 * best_dist)
            if candidates.size == 0:
                continue

        dist = space.distance(points[candidates], centers[j])
        closer = dist < best_dist[candidates]
        chosen = candidates[closer]
        best_idx[chosen] = j
        best_dist[chosen] = dist[closer]

    return best_idx


def _partial_sums(
    points: np.ndarray,
    assignments: np.ndarray,
    k: int,
    space: PointSpace,
) -> tuple[list[np.ndarray], np.ndarray]:
    counts = np.bincount(assignments, minlength=k)
    sums = []
    for i in range(k):
        total = space.zero()
        if counts[i]:
            total = space.accumulate(total, points[assignments == i])
        sums.append(total)
    return sums, counts


def _chunks(n: int, size: int) -> Iterator[slice]:
    for start in range(0, n, size):
        yield slice(start, min(start + size, n))


def _validate(
    points: np.ndarray, k: int, iterations: int, seed: int, jobs: int
) -> None:
    if points.size == 0:
        msg = "cannot cluster an empty set of points"
        raise InvalidConfigurationError(msg)
    if points.ndim != 2:  # noqa: PLR2004
        msg = f"expected an (n, channels) array of points, got shape {points.shape}"
        raise MalformedPointsError(msg)
    if k < 1:
        msg = f"number of clusters must be at least 1, got {k}"
        raise InvalidConfigurationError(msg)
    if k > len(points):
        msg = f"cannot pick {k} clusters from {len(points)} points"
        raise InvalidConfigurationError(msg)
    if iterations < 0:
        msg = f"iterations must be non-negative, got {iterations}"
        raise InvalidConfigurationError(msg)
    if seed < 0:
        msg = f"seed must be non-negative, got {seed}"
        raise InvalidConfigurationError(msg)
    if jobs < 1:
        msg = f"jobs must be at least 1, got {jobs}"
        raise InvalidConfigurationError(msg)


def cluster(  # noqa: PLR0913
    points: ArrayLike,
    k: int,
    iterations: int,
    seed: int,
    *,
    space: PointSpace | None = None,
    observer: ProgressObserver | None = None,
    jobs: int = 1,
    chunk_size: int = CHUNK_SIZE,
) -> tuple[np.ndarray, np.ndarray]:
    """Partition ``points`` into ``k`` clusters.

    Runs exactly ``iterations`` assignment/update rounds starting from ``k``
    distinct points drawn with ``seed``. Returns ``(centers, assignments)``
    such that ``points[i]`` belongs to ``centers[assignments[i]]``.

    Args:
        points: ``(n, channels)`` color values
        k: Number of clusters, ``1 <= k <= n``
        iterations: Number of rounds to run, no early stopping
        seed: Seed for the initial center selection
        space: Point capability; inferred from the channel count if omitted
        observer: Receives progress events, never affects the result
        jobs: Worker threads for the assignment and update passes
        chunk_size: Points handled per work unit

    Raises:
        InvalidConfigurationError: If the parameters cannot be satisfied
        MalformedPointsError: If points do not match the color space

    """
    points = np.asarray(points)
    _validate(points, k, iterations, seed, jobs)
    space = space if space is not None else space_for(points.shape[1])
    if points.shape[1] != space.channels:
        msg = (
            f"points have {points.shape[1]} channels, "
            f"{space!r} expects {space.channels}"
        )
        raise MalformedPointsError(msg)
    observer = observer if observer is not None else NullProgress()

    n = len(points)
    logger.debug(
        "k-means: %d points, k=%d, %d iterations, seed=%d, jobs=%d",
        n,
        k,
        iterations,
        seed,
        jobs,
    )

    centers = points[sample_indices(n, k, seed)].copy()
    assignments = np.zeros(n, dtype=np.intp)
    slices = list(_chunks(n, chunk_size))
    executor = ThreadPoolExecutor(max_workers=jobs) if jobs > 1 else None

    try:
        for iteration in range(iterations):
            observer.on_iteration(iteration + 1, iterations)
            table = center_distances(centers, space, executor)

            def work(
                part: slice, centers: np.ndarray = centers, table: np.ndarray = table
            ) -> tuple[np.ndarray, list[np.ndarray], np.ndarray]:
                chunk_assignments = assign(points[part], centers, space, table)
                sums, counts = _partial_sums(
                    points[part], chunk_assignments, k, space
                )
                return chunk_assignments, sums, counts

            results = executor.map(work, slices) if executor else map(work, slices)

            # merge partitioned accumulators in chunk order
            sums = [space.zero() for _ in range(k)]
            counts = np.zeros(k, dtype=np.int64)
            for part, (chunk_assignments, chunk_sums, chunk_counts) in zip(
                slices, results, strict=True
            ):
                assignments[part] = chunk_assignments
                counts += chunk_counts
                for i in range(k):
                    sums[i] = sums[i] + chunk_sums[i]
                observer.on_assignment(part.stop, n)

            for i in range(k):
                if counts[i]:
                    centers[i] = space.mean(sums[i], int(counts[i]))
                else:
                    logger.debug(
                        "cluster %d is empty in iteration %d, keeping its center",
                        i,
                        iteration + 1,
                    )
    finally:
        if executor:
            executor.shutdown(wait=True)
        observer.on_finish()

    return centers, assignments
