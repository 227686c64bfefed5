from .logger import ClusterLogger

__all__ = ["ClusterLogger"]
