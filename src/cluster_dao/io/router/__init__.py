"""Role-based routing and the DAO base class."""

from .dao import DAO
from .router import ConnectionCluster, RoleConfig, Router

__all__ = ["DAO", "Router", "RoleConfig", "ConnectionCluster"]
