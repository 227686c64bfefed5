"""
A single cluster slot: sufficient statistics plus a cached variance.
"""

from __future__ import annotations

import math
from typing import Hashable, Optional

import numpy as np

from .errors import InvalidOperation
from .models import ClusterResult
from .space import PointLike, Space

__all__ = ["Cluster", "check_mass"]


def check_mass(m: float) -> float:
    """Validate a point or cluster mass (finite and non-negative)."""
    m = float(m)
    if not math.isfinite(m) or m < 0.0:
        raise ValueError(f"Mass must be finite and non-negative, got {m}")
    return m


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


class Cluster:
    """
    A cluster of weighted points, summarised by its mass and first and
    second mass-weighted moments.

    `variance` is a cached value. It is only ever written by `_recompute()`
    (or copied verbatim from another cluster), which every mutating method
    calls before returning.
    """

    def __init__(self, space: Space):
        self._space = space
        self._count = 0
        self._m0 = 0.0
        self._m1 = space.new_origin()
        self._m2 = space.new_origin()
        self._var = 0.0
        self.key: Optional[Hashable] = None
        # set while the owning set is merging this cluster away
        self.removed = False

    # Read-only accessors

    @property
    def space(self) -> Space:
        return self._space

    @property
    def count(self) -> int:
        """Number of points absorbed (including zero-mass points)."""
        return self._count

    @property
    def mass(self) -> float:
        return self._m0

    @property
    def m1(self) -> np.ndarray:
        """Mass-weighted coordinate sum (read-only view)."""
        return _readonly(self._m1)

    @property
    def m2(self) -> np.ndarray:
        """Mass-weighted coordinate-square sum (read-only view)."""
        return _readonly(self._m2)

    @property
    def variance(self) -> float:
        return self._var

    @property
    def centroid(self) -> np.ndarray:
        return self._space.centroid(self._m0, self._m1)

    @property
    def is_empty(self) -> bool:
        return self._count == 0

    # Mutation

    def clear(self) -> None:
        """Remove all points, their mass, and the key."""
        self._count = 0
        self._m0 = 0.0
        self._space.set_to_origin(self._m1)
        self._space.set_to_origin(self._m2)
        self._var = 0.0
        self.key = None

    def set_to_point(self, m: float, pt: PointLike) -> None:
        """Make this cluster consist of the single point `pt` with mass `m`."""
        m = check_mass(m)
        pt = self._space.coerce(pt)
        if m == 0.0:
            if self._count != 0:
                self._space.set_to_origin(self._m1)
                self._space.set_to_origin(self._m2)
        else:
            self._space.set_to_scaled(self._m1, m, pt)
            self._space.set_to_scaled_sqr(self._m2, m, pt)
        self._count = 1
        self._m0 = m
        self._var = 0.0

    def add_point(self, m: float, pt: PointLike) -> None:
        """
        Add a point to the cluster.

        A zero-mass point is counted but leaves the statistics untouched.
        """
        if self._count == 0:
            self.set_to_point(m, pt)
            return
        m = check_mass(m)
        pt = self._space.coerce(pt)
        self._count += 1
        if m != 0.0:
            self._m0 += m
            self._space.add_scaled(self._m1, m, pt)
            self._space.add_scaled_sqr(self._m2, m, pt)
            self._recompute()

    def set_to_cluster(self, other: Cluster) -> None:
        """Copy mass, moments and variance from `other` (not count or key)."""
        if other is self:
            raise InvalidOperation("cannot set cluster to itself")
        self._check_compatible(other)
        self._m0 = other._m0
        self._space.set_to(self._m1, other._m1)
        self._space.set_to(self._m2, other._m2)
        self._var = other._var

    def add_cluster(self, other: Cluster) -> None:
        """Absorb all of `other`'s points into this cluster."""
        if other is self:
            raise InvalidOperation("cannot add cluster to itself")
        self._check_compatible(other)
        if other._count == 0:
            return
        if self._count == 0:
            self.set_to_cluster(other)
            self._count = other._count
            return
        self._count += other._count
        self._m0 += other._m0
        self._space.add(self._m1, other._m1)
        self._space.add(self._m2, other._m2)
        self._recompute()

    # Hypothetical costs

    def test_add_point(self, m: float, pt: PointLike) -> float:
        """Increase in variance if the point were added. Does not mutate."""
        m = check_mass(m)
        if self._m0 == 0.0 and m == 0.0:
            return 0.0
        pt = self._space.coerce(pt)
        return self._space.variance_with_point(self._m0, self._m1, self._m2, m, pt) - self._var

    def test_merge_with(self, other: Cluster) -> float:
        """
        Variance of the cluster that would result from merging with `other`.

        Note: unlike `test_add_point` this is the combined variance, not the
        increase.
        """
        if self._m0 == 0.0 and other._m0 == 0.0:
            return 0.0
        return self._space.variance_of_union(
            self._m0, self._m1, self._m2, other._m0, other._m1, other._m2
        )

    # Export

    def to_result(self, slot: int) -> ClusterResult:
        return ClusterResult(
            slot=slot,
            key=self.key,
            count=self._count,
            mass=self._m0,
            variance=self._var,
            centroid=tuple(float(x) for x in self.centroid),
        )

    def _check_compatible(self, other: Cluster) -> None:
        if other._m1.shape != self._m1.shape:
            raise ValueError(
                f"Cluster dimensions differ: {other._m1.shape[0]} vs {self._m1.shape[0]}"
            )

    def _recompute(self) -> None:
        self._var = 0.0 if self._m0 == 0.0 else self._space.variance(self._m0, self._m1, self._m2)

    def __repr__(self) -> str:
        return (
            f"Cluster(count={self._count}, mass={self._m0}, "
            f"variance={self._var}, key={self.key!r})"
        )

