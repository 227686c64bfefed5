"""
Data models for clustering results.

Defines the immutable snapshot handed out by a ClusterSet.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional


@dataclass(frozen=True)
class ClusterResult:
    """Read-only snapshot of one live cluster."""

    slot: int                    # Slot index within the owning set
    key: Optional[Hashable]      # Key assigned to the cluster, may be None
    count: int                   # Points absorbed (zero-mass points included)
    mass: float                  # Total mass
    variance: float              # Mass-weighted total squared deviation
    centroid: tuple[float, ...]  # Mean point (m1 / m0)

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "slot": self.slot,
            "key": self.key,
            "count": self.count,
            "mass": self.mass,
            "variance": self.variance,
            "centroid": list(self.centroid),
        }

    @classmethod
    def from_dict(cls, data: dict) -> ClusterResult:
        return cls(
            slot=data["slot"],
            key=data.get("key"),
            count=data["count"],
            mass=data["mass"],
            variance=data["variance"],
            centroid=tuple(data["centroid"]),
        )
