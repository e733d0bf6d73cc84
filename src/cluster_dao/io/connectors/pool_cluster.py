"""
PyMySQL pool cluster.

Keeps one bounded connection pool per named node and hands out connections by
node-id pattern (``master``, ``slave*``). Connections are only ever handed out
through ``get_connection``, a context manager that returns the connection to
its pool on every exit path.
"""

import random
import re
import threading
from contextlib import contextmanager
from fnmatch import fnmatchcase
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pymysql
from pymysql.constants import CLIENT
from pymysql.cursors import DictCursor

from cluster_dao.config.cluster_loader import ClusterConfig, NodeConfig, load_cluster_config
from cluster_dao.config.settings import Settings, get_settings
from cluster_dao.infrastructure.sql.core.identifier import escape_identifier
from cluster_dao.infrastructure.sql.core.parameters import format_template
from cluster_dao.io.connectors.exceptions import (
    ClusterError,
    NoMatchingNodeError,
    PoolExhaustedError,
)
from cluster_dao.io.models import QueryResult
from cluster_dao.utils.logging import get_logger

logger = get_logger(__name__)

# Errors after which a connection must not go back to the pool
CONNECTION_LEVEL_ERRORS = (pymysql.err.OperationalError, pymysql.err.InterfaceError)

SELECTORS = ("RR", "RANDOM", "ORDER")

# "Rows matched: 1  Changed: 0  Warnings: 0" in the OK packet of an UPDATE
CHANGED_ROWS_PATTERN = re.compile(r"\bchanged:\s*(\d+)", re.IGNORECASE)


def _changed_rows(cursor) -> int:
    """
    Rows actually modified, parsed from the server's OK packet message.

    Connections use FOUND_ROWS, so ``rowcount`` counts matched rows; only an
    UPDATE reports how many of those changed. Anything else counts as 0.
    """
    result = getattr(cursor, "_result", None)
    message = getattr(result, "message", None)
    if isinstance(message, bytes):
        message = message.decode("utf-8", "replace")
    if not isinstance(message, str):
        return 0
    match = CHANGED_ROWS_PATTERN.search(message)
    return int(match.group(1)) if match else 0


class ClusterConnection:
    """A pooled connection checked out for a single call."""

    def __init__(self, node_id: str, raw: pymysql.connections.Connection):
        self.node_id = node_id
        self.raw = raw

    def execute(self, sql: str, values: Any = None) -> QueryResult:
        """
        Render ``sql`` with ``values`` and run it.

        Returns:
            QueryResult with rows for statements that return a result set,
            otherwise the insert id and affected row counters
        """
        statement = format_template(sql, values if values is not None else [])
        with self.raw.cursor() as cursor:
            # args=None: the statement is already rendered, skip %-formatting
            cursor.execute(statement)
            if cursor.description:
                return QueryResult(
                    rows=list(cursor.fetchall()),
                    fields=list(cursor.description),
                    statement=statement,
                )
            return QueryResult(
                statement=statement,
                insert_id=cursor.lastrowid or 0,
                affected_rows=max(cursor.rowcount, 0),
                changed_rows=_changed_rows(cursor),
            )


class NodePool:
    """Bounded pool of PyMySQL connections to one node."""

    def __init__(
        self,
        node_id: str,
        config: NodeConfig,
        size: int,
        acquire_timeout: float,
        connect_options: Dict[str, Any],
    ):
        self.node_id = node_id
        self.config = config
        self.size = size
        self.acquire_timeout = acquire_timeout
        self._connect_options = connect_options
        self._idle: List[pymysql.connections.Connection] = []
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(size)

    def _connect(self) -> pymysql.connections.Connection:
        return pymysql.connect(**self.config.connect_kwargs(), **self._connect_options)

    def acquire(self) -> pymysql.connections.Connection:
        """Take an idle connection or open a new one while under ``size``."""
        if not self._slots.acquire(timeout=self.acquire_timeout):
            raise PoolExhaustedError(self.node_id, self.acquire_timeout)

        try:
            with self._lock:
                conn = self._idle.pop() if self._idle else None
            if conn is None:
                conn = self._connect()
                logger.debug("database.connection.opened", node=self.node_id)
            else:
                self._revive(conn)
            return conn
        except BaseException:
            self._slots.release()
            raise

    def _revive(self, conn: pymysql.connections.Connection) -> None:
        try:
            conn.ping(reconnect=True)
        except pymysql.Error:
            self._close_quietly(conn)
            raise

    def release(self, conn: pymysql.connections.Connection) -> None:
        """Return a healthy connection to the pool."""
        with self._lock:
            self._idle.append(conn)
        self._slots.release()

    def _close_quietly(self, conn: pymysql.connections.Connection) -> None:
        try:
            conn.close()
        except pymysql.Error as e:
            logger.warning(
                "database.connection.close_failed", node=self.node_id, error=str(e)
            )

    def discard(self, conn: pymysql.connections.Connection) -> None:
        """Close a broken connection and free its slot."""
        try:
            self._close_quietly(conn)
        finally:
            self._slots.release()

    def close(self) -> None:
        """Close all idle connections."""
        with self._lock:
            idle, self._idle = self._idle, []
        for conn in idle:
            self._close_quietly(conn)


class PoolCluster:
    """
    Named node pools addressed by shell-style patterns.

    Args:
        selector: How to pick among several matching nodes: ``RR`` (round
            robin per pattern), ``RANDOM`` or ``ORDER`` (first configured)
        pool_size: Maximum connections per node
        acquire_timeout: Seconds to wait for a free connection
        connect_timeout: MySQL connect timeout in seconds
        read_timeout: MySQL read timeout in seconds
        charset: Connection charset

    Example:
        >>> cluster = PoolCluster()
        >>> cluster.add("master", NodeConfig(uri="mysql+pymysql://app@db-master/app"))
        >>> with cluster.get_connection("master") as conn:
        ...     conn.execute("SELECT ?? FROM ??", ["id", "users"])
    """

    def __init__(
        self,
        selector: str = "RR",
        pool_size: int = 10,
        acquire_timeout: float = 10.0,
        connect_timeout: int = 10,
        read_timeout: int = 30,
        charset: str = "utf8mb4",
    ):
        if selector not in SELECTORS:
            raise ValueError(f"selector must be one of {SELECTORS}, got: {selector}")
        self.selector = selector
        self.pool_size = pool_size
        self.acquire_timeout = acquire_timeout
        self._connect_options: Dict[str, Any] = {
            "charset": charset,
            "cursorclass": DictCursor,
            "connect_timeout": connect_timeout,
            "read_timeout": read_timeout,
            "autocommit": True,
            "client_flag": CLIENT.FOUND_ROWS,
        }
        self._pools: Dict[str, NodePool] = {}
        self._lock = threading.Lock()
        self._round_robin: Dict[str, int] = {}

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        config: Optional[ClusterConfig] = None,
    ) -> "PoolCluster":
        """Build a cluster from settings and the configured node file."""
        settings = settings or get_settings()
        config = config or load_cluster_config(settings.cluster_config)

        cluster = cls(
            selector=config.selector or settings.pool_selector,
            pool_size=settings.pool_size,
            acquire_timeout=settings.acquire_timeout,
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
            charset=settings.charset,
        )
        for node_id, node in config.nodes.items():
            cluster.add(node_id, node)

        logger.info(
            "database.cluster.initialized",
            nodes=list(config.nodes.keys()),
            selector=cluster.selector,
            pool_size=cluster.pool_size,
        )
        return cluster

    def add(self, node_id: str, config: NodeConfig) -> None:
        """Register a node; ids must be unique."""
        with self._lock:
            if node_id in self._pools:
                raise ValueError(f"Cluster node already exists: {node_id}")
            self._pools[node_id] = NodePool(
                node_id,
                config,
                self.pool_size,
                self.acquire_timeout,
                self._connect_options,
            )

    def remove(self, pattern: str) -> List[str]:
        """Remove and close every node matching ``pattern``."""
        with self._lock:
            removed = [node_id for node_id in self._pools if fnmatchcase(node_id, pattern)]
            pools = [self._pools.pop(node_id) for node_id in removed]
        for pool in pools:
            pool.close()
        return removed

    def nodes(self, pattern: str = "*") -> List[str]:
        """Node ids matching ``pattern``, in configuration order."""
        with self._lock:
            return [node_id for node_id in self._pools if fnmatchcase(node_id, pattern)]

    def _candidates(self, pattern: str) -> List[NodePool]:
        with self._lock:
            pools = [pool for node_id, pool in self._pools.items() if fnmatchcase(node_id, pattern)]
            if not pools:
                return []
            if self.selector == "RR":
                start = self._round_robin.get(pattern, 0)
                self._round_robin[pattern] = start + 1
            elif self.selector == "RANDOM":
                start = random.randrange(len(pools))
            else:
                start = 0
        start %= len(pools)
        return pools[start:] + pools[:start]

    def _acquire(self, pattern: str) -> Tuple[NodePool, pymysql.connections.Connection]:
        candidates = self._candidates(pattern)
        if not candidates:
            raise NoMatchingNodeError(pattern)

        last_error: Optional[Exception] = None
        for pool in candidates:
            try:
                return pool, pool.acquire()
            except (pymysql.Error, PoolExhaustedError) as e:
                last_error = e
                logger.warning(
                    "database.node.unavailable",
                    node=pool.node_id,
                    pattern=pattern,
                    error=str(e),
                )

        raise ClusterError(
            pattern,
            f"No node matching '{pattern}' accepted a connection: {last_error}",
        ) from last_error

    @contextmanager
    def get_connection(self, pattern: str) -> Iterator[ClusterConnection]:
        """
        Check out a connection from a node matching ``pattern``.

        The connection goes back to its pool when the block exits, or is
        discarded when the block raised a connection-level error.

        Raises:
            NoMatchingNodeError: If no node matches
            ClusterError: If every matching node refused a connection
        """
        pool, raw = self._acquire(pattern)
        broken = False
        try:
            yield ClusterConnection(pool.node_id, raw)
        except CONNECTION_LEVEL_ERRORS:
            broken = True
            raise
        finally:
            if broken:
                pool.discard(raw)
            else:
                pool.release(raw)

    def escape_identifier(self, name: str) -> str:
        return escape_identifier(name)

    def format(self, sql: str, values: Any = None) -> str:
        return format_template(sql, values)

    def close(self) -> None:
        """Close idle connections of every node."""
        with self._lock:
            pools = list(self._pools.values())
        for pool in pools:
            pool.close()
        logger.info("database.cluster.closed", nodes=len(pools))
