"""
Role-based query router.

Every operation comes in two forms: one that uses the default role for its
kind of traffic (master for ``query`` and writes, the slave group for fetches)
and an ``*_on`` form that takes the role token explicitly.

Error policy:
- read path (``query``, ``fetch_*``) raises ``QueryExecutionError``
- write path (``insert``, ``update``, ``delete``) returns a zeroed
  ``WriteResult`` carrying the error
"""

import threading
from dataclasses import dataclass, replace
from typing import Any, ContextManager, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from cluster_dao.config.settings import Settings, get_settings
from cluster_dao.infrastructure.normalization.record_normalizer import RecordNormalizer
from cluster_dao.infrastructure.sql.core.parameters import QueryFragment, as_value_list
from cluster_dao.infrastructure.sql.dialects.mysql import MySQLDialect
from cluster_dao.infrastructure.sql.operations.select import (
    SortInput,
    build_limit_clause,
    build_offset_clause,
    build_order_by,
    build_select,
    build_select_ordered,
    build_select_paged,
    push_where,
)
from cluster_dao.infrastructure.sql.operations.write import WriteBuilder
from cluster_dao.io.models import QueryExecutionError, QueryResult, WriteResult
from cluster_dao.utils.logging import get_logger

logger = get_logger(__name__)

Where = Optional[Union[str, Sequence[str]]]


class Connection(Protocol):
    """A checked-out connection."""

    def execute(self, sql: str, values: Any = None) -> QueryResult: ...


class ConnectionCluster(Protocol):
    """Protocol for the cluster client the router executes against."""

    def get_connection(self, pattern: str) -> ContextManager[Connection]: ...
    def escape_identifier(self, name: str) -> str: ...
    def format(self, sql: str, values: Any = None) -> str: ...


@dataclass(frozen=True)
class RoleConfig:
    """Role tokens (pool patterns) for write and read traffic."""

    master: str = "master"
    slave: str = "slave*"

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RoleConfig":
        settings = settings or get_settings()
        return cls(master=settings.master_role, slave=settings.slave_role)


class Router:
    """
    Executes statements on the pool selected by a role token.

    Args:
        cluster: Cluster client (see ``ConnectionCluster``)
        roles: Role tokens; ``master``/``slave*`` when None
        normalizer: Normalizer applied by ``fetch_one``/``fetch_all``

    Example:
        >>> router = Router(PoolCluster.from_settings())
        >>> router.fetch_one("SELECT * FROM ?? WHERE id = ?", ["users", 7])
        >>> router.update("users", {"name": "kim"}, "id = ?", 7)
    """

    build_select = staticmethod(build_select)
    build_select_ordered = staticmethod(build_select_ordered)
    build_select_paged = staticmethod(build_select_paged)
    build_limit_clause = staticmethod(build_limit_clause)
    build_offset_clause = staticmethod(build_offset_clause)
    push_where = staticmethod(push_where)

    def __init__(
        self,
        cluster: ConnectionCluster,
        roles: Optional[RoleConfig] = None,
        normalizer: Optional[RecordNormalizer] = None,
    ):
        self.cluster = cluster
        self._roles = roles or RoleConfig()
        self._roles_lock = threading.Lock()
        self.normalizer = normalizer or RecordNormalizer()
        self.writer = WriteBuilder(MySQLDialect())

    @classmethod
    def from_settings(
        cls,
        cluster: Optional[ConnectionCluster] = None,
        normalizer: Optional[RecordNormalizer] = None,
        settings: Optional[Settings] = None,
    ) -> "Router":
        """Build a router with configured roles, on the configured cluster."""
        settings = settings or get_settings()
        if cluster is None:
            from cluster_dao.io.connectors.pool_cluster import PoolCluster

            cluster = PoolCluster.from_settings(settings)
        return cls(cluster, RoleConfig.from_settings(settings), normalizer)

    # Roles

    @property
    def roles(self) -> RoleConfig:
        return self._roles

    def set_master_role(self, token: str) -> None:
        """Route default write traffic to ``token``."""
        with self._roles_lock:
            self._roles = replace(self._roles, master=token)

    def set_slave_role(self, token: str) -> None:
        """Route default read traffic to ``token``."""
        with self._roles_lock:
            self._roles = replace(self._roles, slave=token)

    # Execution

    def query(self, sql: str, values: Any = None) -> QueryResult:
        """Execute on the master role."""
        return self.query_on(self._roles.master, sql, values)

    def query_on(self, role: str, sql: str, values: Any = None) -> QueryResult:
        """
        Execute ``sql`` with ``values`` on a connection of ``role``.

        The connection is released when the call finishes, whether it
        succeeded or not.

        Raises:
            QueryExecutionError: If no connection could be obtained or the
                statement failed
        """
        values = as_value_list(values)
        try:
            with self.cluster.get_connection(role) as conn:
                result = conn.execute(sql, values)
        except Exception as e:
            error = QueryExecutionError(sql, values, e, role)
            logger.error("database.query.failed", **error.to_dict())
            raise error from e

        logger.debug(
            "database.query.executed",
            role=role,
            sql=sql,
            row_count=len(result.rows),
            affected_rows=result.affected_rows,
        )
        return result

    def master(self, sql: str, values: Any = None) -> QueryResult:
        return self.query_on(self._roles.master, sql, values)

    def slave(self, sql: str, values: Any = None) -> QueryResult:
        return self.query_on(self._roles.slave, sql, values)

    # Reads

    def fetch_field(self, sql: str, values: Any, field: str) -> Any:
        """Return ``field`` of the first row from the slave role, or None."""
        return self.fetch_field_on(self._roles.slave, sql, values, field)

    def fetch_field_on(self, role: str, sql: str, values: Any, field: str) -> Any:
        row = self.query_on(role, sql, values).first()
        return None if row is None else row.get(field)

    def fetch_one(self, sql: str, values: Any = None) -> Optional[Dict[str, Any]]:
        """Return the first row, normalized, from the slave role; None for no rows."""
        return self.fetch_one_on(self._roles.slave, sql, values)

    def fetch_one_on(self, role: str, sql: str, values: Any = None) -> Optional[Dict[str, Any]]:
        row = self.query_on(role, sql, values).first()
        return None if row is None else self.normalizer.normalize(row)

    def fetch_all(self, sql: str, values: Any = None) -> List[Dict[str, Any]]:
        """Return all rows, normalized, from the slave role."""
        return self.fetch_all_on(self._roles.slave, sql, values)

    def fetch_all_on(self, role: str, sql: str, values: Any = None) -> List[Dict[str, Any]]:
        return self.normalizer.normalize_many(self.query_on(role, sql, values).rows)

    # Writes

    def _write(self, role: str, fragment: QueryFragment) -> WriteResult:
        try:
            result = self.query_on(role, fragment.sql, fragment.values)
        except QueryExecutionError as e:
            return WriteResult.failed(e)
        return WriteResult.from_query_result(result)

    def insert(self, table: str, record: Mapping[str, Any]) -> WriteResult:
        """``INSERT INTO <table> SET <record>`` on the master role."""
        return self.insert_on(self._roles.master, table, record)

    def insert_on(self, role: str, table: str, record: Mapping[str, Any]) -> WriteResult:
        return self._write(role, self.writer.insert(table, record))

    def update(
        self,
        table: str,
        record: Mapping[str, Any],
        where: Where = None,
        values: Any = None,
    ) -> WriteResult:
        """``UPDATE <table> SET <record> [WHERE ...]`` on the master role."""
        return self.update_on(self._roles.master, table, record, where, values)

    def update_on(
        self,
        role: str,
        table: str,
        record: Mapping[str, Any],
        where: Where = None,
        values: Any = None,
    ) -> WriteResult:
        return self._write(role, self.writer.update(table, record, where, values))

    def delete(self, table: str, where: Where = None, values: Any = None) -> WriteResult:
        """``DELETE FROM <table> [WHERE ...]`` on the master role."""
        return self.delete_on(self._roles.master, table, where, values)

    def delete_on(self, role: str, table: str, where: Where = None, values: Any = None) -> WriteResult:
        return self._write(role, self.writer.delete(table, where, values))

    # SQL helpers that need the client's escaping

    def order_by(
        self, sort_specs: Optional[Sequence[SortInput]], allowed_fields: Optional[Sequence[str]]
    ) -> List[str]:
        """ORDER BY items for ``sort_specs`` restricted to ``allowed_fields``."""
        return build_order_by(sort_specs, allowed_fields, escape=self.cluster.escape_identifier)

    def format(self, sql: str, values: Any = None) -> str:
        """Render a ``?``/``??`` template, for diagnostics."""
        return self.cluster.format(sql, values)
