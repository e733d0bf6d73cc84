"""Database cluster connectors."""

from .exceptions import ClusterError, NoMatchingNodeError, PoolExhaustedError
from .pool_cluster import ClusterConnection, NodePool, PoolCluster

__all__ = [
    "ClusterError",
    "NoMatchingNodeError",
    "PoolExhaustedError",
    "ClusterConnection",
    "NodePool",
    "PoolCluster",
]
