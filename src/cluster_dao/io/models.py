"""Result envelopes and errors shared by the connection and routing layers."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


class QueryExecutionError(Exception):
    """Raised when a statement could not be executed against the cluster."""

    def __init__(
        self,
        sql: str,
        values: Sequence[Any],
        original_error: Exception,
        role: Optional[str] = None,
    ):
        self.sql = sql
        self.values = list(values)
        self.original_error = original_error
        self.role = role
        super().__init__(
            f"Query failed on role '{role}': "
            f"{type(original_error).__name__}: {original_error}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to structured dict for logging."""
        return {
            "error_type": "QueryExecutionError",
            "role": self.role,
            "sql": self.sql,
            "values": self.values,
            "original_error_type": type(self.original_error).__name__,
            "original_error_message": str(self.original_error),
        }


@dataclass
class QueryResult:
    """Rows, column metadata and write counters of one executed statement."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    fields: List[Any] = field(default_factory=list)
    statement: str = ""
    insert_id: int = 0
    affected_rows: int = 0
    changed_rows: int = 0

    @property
    def columns(self) -> List[str]:
        """Column names taken from the DB-API description."""
        return [description[0] for description in self.fields]

    def first(self) -> Optional[Dict[str, Any]]:
        """Return the first row, or None when there are no rows."""
        return self.rows[0] if self.rows else None


@dataclass
class WriteResult:
    """Outcome of an INSERT/UPDATE/DELETE.

    On failure the counters are zero and ``error`` holds the cause; zero
    counters alone do not mean failure (an UPDATE may match nothing).
    """

    insert_id: int = 0
    affected_rows: int = 0
    changed_rows: int = 0
    error: Optional[QueryExecutionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_query_result(cls, result: QueryResult) -> "WriteResult":
        return cls(
            insert_id=result.insert_id,
            affected_rows=result.affected_rows,
            changed_rows=result.changed_rows,
        )

    @classmethod
    def failed(cls, error: QueryExecutionError) -> "WriteResult":
        return cls(error=error)

    def as_dict(self) -> Dict[str, int]:
        return {
            "insert_id": self.insert_id,
            "affected_rows": self.affected_rows,
            "changed_rows": self.changed_rows,
        }
