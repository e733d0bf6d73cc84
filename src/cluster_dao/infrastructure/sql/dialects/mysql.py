"""
MySQL-specific SQL dialect implementation.

Provides the ``?``/``??`` templates used for INSERT/UPDATE/DELETE statements;
identifiers and values are substituted later by the connection layer.
"""

from typing import List


class MySQLDialect:
    """MySQL SQL dialect implementation."""

    name = "mysql"

    def build_insert(self) -> str:
        """Template for ``[table, record]``."""
        return "INSERT INTO ?? SET ?"

    def build_update(self, where: List[str]) -> str:
        """
        Template for ``[table, record, *where_values]``.

        Args:
            where: WHERE clause fragments, already carrying their operands

        Returns:
            UPDATE SQL template
        """
        sql = ["UPDATE ?? SET ?"]
        if where:
            sql.extend(["WHERE", " ".join(where)])
        return " ".join(sql)

    def build_delete(self, where: List[str]) -> str:
        """Template for ``[table, *where_values]``."""
        sql = ["DELETE FROM ??"]
        if where:
            sql.extend(["WHERE", " ".join(where)])
        return " ".join(sql)
