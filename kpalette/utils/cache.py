"""LRU cache for clustering results."""

from collections import OrderedDict

import numpy as np

CACHE_SIZE_LIMIT = 16

ClusterResult = tuple[np.ndarray, np.ndarray]


class ResultCache:
    """LRU cache of ``(centers, assignments)`` keyed by settings."""

    def __init__(self, max_size: int = CACHE_SIZE_LIMIT) -> None:
        """Create cache with size limit."""
        self.max_size = max_size
        self._entries: OrderedDict[str, ClusterResult] = OrderedDict()

    def get(self, key: str) -> ClusterResult | None:
        """Get a result, marking it most recently used."""
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def put(self, key: str, result: ClusterResult) -> None:
        """Store a result, evicting the least recently used one when full."""
        if key in self._entries:
            self._entries.move_to_end(key)
        elif len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
        self._entries[key] = result
