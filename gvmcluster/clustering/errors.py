"""
Exceptions raised by the clustering engine.
"""


class ClusteringError(Exception):
    """Base exception for clustering errors."""

    pass


class InvalidOperation(ClusteringError, ValueError):
    """Raised when a call is a caller logic error (e.g. merging a cluster into itself)."""

    pass


class NotFound(ClusteringError, KeyError):
    """Raised when no live cluster carries the requested key."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"No cluster with key: {key!r}")

    def __str__(self) -> str:
        return self.args[0]


class NoPairsAvailable(ClusteringError):
    """Raised when a merge is requested with fewer than two live clusters."""

    pass
