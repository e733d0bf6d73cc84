"""SQL dialects package."""

from .mysql import MySQLDialect

__all__ = ["MySQLDialect"]
