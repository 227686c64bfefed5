"""
Online clustering by greedy variance minimization.

Maintains a fixed number of clusters over a stream of weighted points,
growing or merging clusters so aggregate variance increases least.
"""

from .errors import (
    ClusteringError,
    InvalidOperation,
    NotFound,
    NoPairsAvailable,
)
from .space import (
    Space,
    VectorSpace,
    ScaledVectorSpace,
)
from .models import ClusterResult
from .cluster import Cluster
from .pair import ClusterPair
from .keyer import Keyer, DefaultKeyer
from .cluster_set import ClusterSet
from .records import RecordAdapter

__all__ = [
    # Errors
    "ClusteringError",
    "InvalidOperation",
    "NotFound",
    "NoPairsAvailable",
    # Spaces
    "Space",
    "VectorSpace",
    "ScaledVectorSpace",
    # Engine
    "ClusterResult",
    "Cluster",
    "ClusterPair",
    "Keyer",
    "DefaultKeyer",
    "ClusterSet",
    # Records
    "RecordAdapter",
]
