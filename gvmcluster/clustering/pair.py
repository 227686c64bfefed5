"""
Cached merge cost between two cluster slots.
"""

from __future__ import annotations

import math

from .cluster import Cluster

__all__ = ["ClusterPair"]


class ClusterPair:
    """
    The cost of merging the clusters in slots `a` and `b`.

    The cost is the increase in variance the merge would cause. A pair is
    only valid while both endpoints are live; the owning set refreshes it
    whenever either endpoint changes.
    """

    def __init__(self, a: int, b: int, cluster_a: Cluster, cluster_b: Cluster):
        if a == b:
            raise ValueError("a pair needs two distinct slots")
        if a > b:
            a, b = b, a
            cluster_a, cluster_b = cluster_b, cluster_a
        self.a = a
        self.b = b
        self.cluster_a = cluster_a
        self.cluster_b = cluster_b
        self._cost = math.inf
        self._valid = False

    @property
    def cost(self) -> float:
        return self._cost

    @property
    def valid(self) -> bool:
        return self._valid

    def other(self, slot: int) -> int:
        if slot == self.a:
            return self.b
        if slot == self.b:
            return self.a
        raise ValueError(f"slot {slot} is not an endpoint of {self!r}")

    def invalidate(self) -> None:
        """Mark stale until the next refresh."""
        self._cost = math.inf
        self._valid = False

    def refresh(self) -> None:
        """Recompute the cost from the endpoints' current statistics."""
        a, b = self.cluster_a, self.cluster_b
        if a.is_empty or b.is_empty or a.removed or b.removed:
            self._cost = math.inf
            self._valid = False
            return
        self._cost = a.test_merge_with(b) - a.variance - b.variance
        self._valid = True

    def __repr__(self) -> str:
        return f"ClusterPair(a={self.a}, b={self.b}, cost={self._cost}, valid={self._valid})"
