"""Configuration management for cluster-dao.

Usage:
    >>> from cluster_dao.config import get_settings
    >>> settings = get_settings()
    >>> settings.slave_role
    'slave*'
"""

from cluster_dao.config.cluster_loader import (
    ClusterConfig,
    ClusterConfigError,
    NodeConfig,
    load_cluster_config,
)
from cluster_dao.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "ClusterConfig",
    "ClusterConfigError",
    "NodeConfig",
    "load_cluster_config",
]
