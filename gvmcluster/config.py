"""
Configuration for clustering runs.
"""

import math
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

import yaml

from .clustering import ClusterSet, RecordAdapter, ScaledVectorSpace, Space, VectorSpace

__all__ = [
    "ClusterConfig",
    "load_config",
]


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class ClusterConfig:
    """Configuration for a clustering run."""

    # Engine
    capacity: int = 20
    merge_on_insert: bool = False  # Merge cheapest pair instead of growing nearest when cheaper

    # Space - dimensions may be inferred from columns or axis_scales
    dimensions: Optional[int] = None
    axis_scales: Optional[list[float]] = None  # Per-axis scale factors (ScaledVectorSpace)

    # Records
    columns: list[str] = field(default_factory=list)
    mass_column: Optional[str] = None
    key_column: Optional[str] = None

    # Post-processing (reduce) - None = disabled
    max_variance: Optional[float] = None
    min_clusters: int = 0

    # Output
    verbose: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ValueError if the settings are inconsistent."""
        if not _is_int(self.capacity) or self.capacity < 1:
            raise ValueError(f"capacity must be a positive integer, got {self.capacity!r}")
        if not _is_int(self.min_clusters) or self.min_clusters < 0:
            raise ValueError(f"min_clusters must be a non-negative integer, got {self.min_clusters!r}")
        if self.dimensions is not None and (not _is_int(self.dimensions) or self.dimensions < 1):
            raise ValueError(f"dimensions must be a positive integer, got {self.dimensions!r}")
        if self.max_variance is not None and (
            isinstance(self.max_variance, bool)
            or not isinstance(self.max_variance, (int, float))
            or math.isnan(self.max_variance)
            or self.max_variance < 0
        ):
            raise ValueError(f"max_variance must be a non-negative number, got {self.max_variance!r}")

        dims = {
            name: n for name, n in (
                ("dimensions", self.dimensions),
                ("axis_scales", len(self.axis_scales) if self.axis_scales is not None else None),
                ("columns", len(self.columns) if self.columns else None),
            ) if n is not None
        }
        if len(set(dims.values())) > 1:
            raise ValueError(f"Inconsistent dimensions: {dims}")

    @property
    def resolved_dimensions(self) -> int:
        if self.dimensions is not None:
            return self.dimensions
        if self.axis_scales is not None:
            return len(self.axis_scales)
        if self.columns:
            return len(self.columns)
        raise ValueError("Cannot determine dimensions: set dimensions, axis_scales or columns")

    def build_space(self) -> Space:
        if self.axis_scales is not None:
            return ScaledVectorSpace(self.axis_scales)
        return VectorSpace(self.resolved_dimensions)

    def build_cluster_set(self, logger=None) -> ClusterSet:
        return ClusterSet(
            self.build_space(),
            self.capacity,
            merge_on_insert=self.merge_on_insert,
            logger=logger,
        )

    def build_adapter(self) -> RecordAdapter:
        return RecordAdapter(self.columns, mass_column=self.mass_column, key_column=self.key_column)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClusterConfig":
        """Create from dict, filtering out unknown keys."""
        # Get valid field names from dataclass
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def load_config(path: Path) -> ClusterConfig:
    """
    Load a ClusterConfig from a YAML file.

    Args:
        path: YAML file with top-level config keys

    Returns:
        ClusterConfig with defaults for anything not set
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No config file at {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    return ClusterConfig.from_dict(data)
