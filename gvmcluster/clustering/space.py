"""
Spaces: the numeric strategy a cluster set is built over.

A space fixes the point type (here a float64 numpy vector of a given
dimension), how points are scaled and accumulated in place, and how a
variance is computed from sufficient statistics alone:

    m0 = sum(mass)
    m1 = sum(mass * x)
    m2 = sum(mass * x**2)

so that merge costs are O(1) in the number of absorbed points.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence, Union

import numpy as np

__all__ = ["Space", "VectorSpace", "ScaledVectorSpace", "PointLike"]

PointLike = Union[np.ndarray, Sequence[float], float]


class Space(ABC):
    """
    Base class for spaces over fixed-dimension float vectors.

    Subclasses only decide how the per-axis squared deviations are combined
    into a single variance (see `_sum_sq`). Every variance method returns 0.0
    when the total mass is zero.
    """

    def __init__(self, dimensions: int):
        if dimensions < 1:
            raise ValueError(f"dimensions must be positive, got {dimensions}")
        self._dimensions = int(dimensions)

    @property
    def dimensions(self) -> int:
        return self._dimensions

    # Point construction and in-place operations

    def new_origin(self) -> np.ndarray:
        """Return a fresh point at the origin."""
        return np.zeros(self._dimensions, dtype=np.float64)

    def coerce(self, pt: PointLike) -> np.ndarray:
        """Convert a caller-supplied point to this space's point type."""
        arr = np.atleast_1d(np.asarray(pt, dtype=np.float64))
        if arr.shape != (self._dimensions,):
            raise ValueError(
                f"Expected a point of dimension {self._dimensions}, got shape {arr.shape}"
            )
        if not np.all(np.isfinite(arr)):
            raise ValueError("Point coordinates must be finite")
        return arr

    def set_to_origin(self, pt: np.ndarray) -> None:
        pt.fill(0.0)

    def set_to(self, dst: np.ndarray, src: np.ndarray) -> None:
        np.copyto(dst, src)

    def set_to_scaled(self, dst: np.ndarray, m: float, pt: np.ndarray) -> None:
        np.multiply(pt, m, out=dst)

    def set_to_scaled_sqr(self, dst: np.ndarray, m: float, pt: np.ndarray) -> None:
        np.multiply(pt, pt, out=dst)
        dst *= m

    def add(self, dst: np.ndarray, pt: np.ndarray) -> None:
        dst += pt

    def add_scaled(self, dst: np.ndarray, m: float, pt: np.ndarray) -> None:
        dst += m * pt

    def add_scaled_sqr(self, dst: np.ndarray, m: float, pt: np.ndarray) -> None:
        dst += m * pt * pt

    def centroid(self, m0: float, m1: np.ndarray) -> np.ndarray:
        """Mean point of a cluster; the origin for a massless cluster."""
        if m0 == 0.0:
            return self.new_origin()
        return m1 / m0

    # Variance from sufficient statistics

    def variance(self, m0: float, m1: np.ndarray, m2: np.ndarray) -> float:
        """Variance of a single cluster."""
        if m0 == 0.0:
            return 0.0
        # cancellation can leave tiny negatives
        return max(0.0, float(self._sum_sq(m0, m1, m2)))

    def variance_with_point(
        self,
        m0: float,
        m1: np.ndarray,
        m2: np.ndarray,
        m: float,
        pt: np.ndarray,
    ) -> float:
        """Variance of a cluster as if the point `pt` of mass `m` were added."""
        total = m0 + m
        if total == 0.0:
            return 0.0
        return self.variance(total, m1 + m * pt, m2 + m * pt * pt)

    def variance_of_union(
        self,
        m0a: float,
        m1a: np.ndarray,
        m2a: np.ndarray,
        m0b: float,
        m1b: np.ndarray,
        m2b: np.ndarray,
    ) -> float:
        """Variance of the union of two clusters' statistics."""
        total = m0a + m0b
        if total == 0.0:
            return 0.0
        return self.variance(total, m1a + m1b, m2a + m2b)

    @abstractmethod
    def _sum_sq(self, m0: float, m1: np.ndarray, m2: np.ndarray) -> float:
        """Combine per-axis squared deviations; m0 is never zero here."""

    def __eq__(self, other) -> bool:
        return type(other) is type(self) and other._dimensions == self._dimensions

    def __hash__(self) -> int:
        return hash((type(self), self._dimensions))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dimensions={self._dimensions})"


class VectorSpace(Space):
    """Euclidean space: variance is the mass-weighted total squared deviation."""

    def _sum_sq(self, m0: float, m1: np.ndarray, m2: np.ndarray) -> float:
        return np.sum(m2 - m1 * m1 / m0)


class ScaledVectorSpace(Space):
    """
    Euclidean space with a scale factor per axis.

    Useful when coordinates come from columns measured in different units:
    a deviation along axis i counts as if the coordinate had been multiplied
    by scales[i].
    """

    def __init__(self, scales: Sequence[float]):
        scales = np.array(scales, dtype=np.float64)
        if scales.ndim != 1 or scales.size == 0:
            raise ValueError("scales must be a non-empty 1D sequence")
        if np.any(scales < 0) or not np.all(np.isfinite(scales)):
            raise ValueError("scales must be finite and non-negative")
        super().__init__(scales.size)
        self._weights = scales * scales
        self._weights.flags.writeable = False
        self._scales = scales
        self._scales.flags.writeable = False

    @property
    def scales(self) -> np.ndarray:
        return self._scales

    def _sum_sq(self, m0: float, m1: np.ndarray, m2: np.ndarray) -> float:
        return np.dot(self._weights, m2 - m1 * m1 / m0)

    def __eq__(self, other) -> bool:
        return super().__eq__(other) and np.array_equal(other._scales, self._scales)

    def __hash__(self) -> int:
        return hash((type(self), tuple(self._scales.tolist())))

    def __repr__(self) -> str:
        return f"ScaledVectorSpace(scales={self._scales.tolist()})"
