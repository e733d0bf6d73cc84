"""
SQL parameter binding utilities.

Statements are written as templates with ``?`` (value) and ``??`` (identifier)
placeholders. The template and its ordered values travel together as a
``QueryFragment`` and are only merged by ``format_template``, which escapes
every value and identifier on the way in.
"""

import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping

from pymysql.converters import escape_item

from .identifier import escape_identifier

PLACEHOLDER_PATTERN = re.compile(r"\?\??")

DEFAULT_CHARSET = "utf8mb4"


@dataclass
class QueryFragment:
    """An SQL template plus the ordered values bound to its placeholders."""

    sql: str
    values: List[Any] = field(default_factory=list)

    def render(self) -> str:
        """Return the template with all placeholders substituted."""
        return format_template(self.sql, self.values)


def escape_value(value: Any) -> str:
    """
    Escape a value for inclusion in a MySQL statement.

    Sequences become comma separated lists (nested sequences are grouped in
    parentheses) and mappings become ```key` = value`` pairs, which is the
    shape ``SET ?`` expects.

    Examples:
        >>> escape_value([1, 2])
        '1, 2'
        >>> escape_value({"name": "a", "age": 3})
        "`name` = 'a', `age` = 3"
        >>> escape_value(None)
        'NULL'
    """
    if isinstance(value, Mapping):
        return ", ".join(
            f"{escape_identifier(str(key))} = {escape_value(item)}"
            for key, item in value.items()
        )
    if isinstance(value, (list, tuple)):
        return ", ".join(
            f"({escape_value(item)})" if isinstance(item, (list, tuple)) else escape_value(item)
            for item in value
        )
    return escape_item(value, DEFAULT_CHARSET)


def escape_identifier_value(value: Any) -> str:
    """Escape the value bound to a ``??`` placeholder."""
    if isinstance(value, (list, tuple)):
        return ", ".join(escape_identifier(str(item)) for item in value)
    return escape_identifier(str(value))


def format_template(sql: str, values: Any = None) -> str:
    """
    Substitute ``?`` and ``??`` placeholders in order.

    A non-sequence ``values`` is treated as a single value. Surplus values are
    ignored and placeholders without a value are left as they are.

    Args:
        sql: SQL template
        values: Values for the placeholders, in order

    Returns:
        The rendered SQL statement

    Examples:
        >>> format_template("SELECT * FROM ?? WHERE ?? = ?", ["users", "id", 7])
        'SELECT * FROM `users` WHERE `id` = 7'
        >>> format_template("INSERT INTO ?? SET ?", ["users", {"name": "kim"}])
        "INSERT INTO `users` SET `name` = 'kim'"
    """
    if values is None:
        return sql
    if not isinstance(values, (list, tuple)):
        values = [values]

    parts: List[str] = []
    last_end = 0
    for index, match in enumerate(PLACEHOLDER_PATTERN.finditer(sql)):
        if index >= len(values):
            break
        value = values[index]
        if match.group() == "??":
            replacement = escape_identifier_value(value)
        else:
            replacement = escape_value(value)
        parts.append(sql[last_end : match.start()])
        parts.append(replacement)
        last_end = match.end()

    parts.append(sql[last_end:])
    return "".join(parts)


def as_value_list(values: Any) -> List[Any]:
    """
    Coerce optional bind values into a fresh list.

    ``None`` becomes ``[]``, a scalar becomes ``[scalar]`` and sequences are
    copied so callers' lists are never mutated.
    """
    if values is None:
        return []
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values]


def as_clause_list(clauses: Any) -> List[str]:
    """Wrap a single clause string into a list; ``None`` becomes ``[]``."""
    if clauses is None:
        return []
    if isinstance(clauses, str):
        return [clauses]
    return list(clauses)
