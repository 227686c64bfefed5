"""
gvmcluster - bounded online clustering over weighted point streams.
"""

from .clustering import ClusterSet, VectorSpace, ScaledVectorSpace
from .config import ClusterConfig, load_config

__all__ = ["ClusterSet", "VectorSpace", "ScaledVectorSpace", "ClusterConfig", "load_config"]
