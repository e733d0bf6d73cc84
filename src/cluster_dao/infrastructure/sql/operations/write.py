"""
SQL write statement builders.

Builds INSERT/UPDATE/DELETE templates together with the bind values aligned to
their placeholders: the table first, then the SET record, then WHERE values.
"""

from typing import Any, List, Mapping, Optional, Protocol, Sequence, Union

from ..core.parameters import QueryFragment, as_clause_list, as_value_list


class Dialect(Protocol):
    """Protocol for SQL dialects."""

    name: str

    def build_insert(self) -> str: ...
    def build_update(self, where: List[str]) -> str: ...
    def build_delete(self, where: List[str]) -> str: ...


class WriteBuilder:
    """
    High-level builder for write statements.

    Example:
        >>> from cluster_dao.infrastructure.sql import MySQLDialect, WriteBuilder
        >>> builder = WriteBuilder(MySQLDialect())
        >>> fragment = builder.update("users", {"name": "kim"}, "id = ?", 7)
        >>> fragment.sql
        'UPDATE ?? SET ? WHERE id = ?'
        >>> fragment.values
        ['users', {'name': 'kim'}, 7]
    """

    def __init__(self, dialect: Dialect):
        """
        Initialize the WriteBuilder.

        Args:
            dialect: SQL dialect to use for statement generation
        """
        self.dialect = dialect

    def insert(self, table: str, record: Mapping[str, Any]) -> QueryFragment:
        """Build ``INSERT INTO <table> SET <record>``."""
        return QueryFragment(self.dialect.build_insert(), [table, record])

    def update(
        self,
        table: str,
        record: Mapping[str, Any],
        where: Optional[Union[str, Sequence[str]]] = None,
        values: Any = None,
    ) -> QueryFragment:
        """
        Build ``UPDATE <table> SET <record> [WHERE ...]``.

        Args:
            table: Table name
            record: Column values for the SET clause
            where: A clause or list of clauses joined with spaces
            values: Values for the WHERE placeholders (scalar or sequence)

        Returns:
            QueryFragment with values ordered table, record, WHERE values
        """
        clauses = as_clause_list(where)
        bound = [table, record] + as_value_list(values)
        return QueryFragment(self.dialect.build_update(clauses), bound)

    def delete(
        self,
        table: str,
        where: Optional[Union[str, Sequence[str]]] = None,
        values: Any = None,
    ) -> QueryFragment:
        """Build ``DELETE FROM <table> [WHERE ...]``."""
        clauses = as_clause_list(where)
        bound = [table] + as_value_list(values)
        return QueryFragment(self.dialect.build_delete(clauses), bound)
