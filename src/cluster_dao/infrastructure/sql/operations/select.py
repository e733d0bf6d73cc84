"""
SELECT statement builders.

Assembles SELECT statements from pre-escaped fragments: projections, tables
(including JOIN text), WHERE clause lists, GROUP BY, ORDER BY and LIMIT.
None of these functions emit placeholders of their own.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

from ..core.identifier import bare_field_name, escape_identifier

DEFAULT_OPERAND = "AND"
DEFAULT_DIRECTION = "DESC"


@dataclass(frozen=True)
class SortSpec:
    """A requested ordering: field name plus ``ASC``/``DESC`` direction."""

    field: str
    dir: Optional[str] = None


SortInput = Union[SortSpec, Mapping[str, Any]]


def _as_list(value: Union[str, Sequence[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def render_field_list(
    prefix: str = "",
    rename_as: str = "",
    fields: Optional[Sequence[str]] = None,
) -> str:
    """
    Render a SELECT projection.

    Args:
        prefix: Prefix put in front of each bare field name (e.g. ``"U."``)
        rename_as: Alias prefix; adds ``AS <rename_as><name>`` when given
        fields: Field specs, possibly qualified or backtick-quoted

    Returns:
        Comma separated projection (empty string for no fields)

    Examples:
        >>> render_field_list("U.", "us_", ["us_no", "name"])
        'U.us_no AS us_us_no, U.name AS us_name'
        >>> render_field_list("", "", ["U.name"])
        'U.name'
    """
    result = []
    for field in fields or []:
        name = bare_field_name(field)
        column = prefix + name if prefix else field
        if rename_as:
            column += f" AS {rename_as}{name}"
        result.append(column)
    return ", ".join(result)


def build_limit_clause(limit: int, offset: int) -> str:
    """
    Build ``LIMIT <offset>, <limit>``.

    Examples:
        >>> build_limit_clause(10, 20)
        'LIMIT 20, 10'
    """
    return f"LIMIT {int(offset)}, {int(limit)}"


def build_offset_clause(page: int, limit: int) -> str:
    """
    Build the LIMIT clause for a 1-based page number.

    Examples:
        >>> build_offset_clause(3, 10)
        'LIMIT 20, 10'
    """
    return build_limit_clause(limit, int(limit) * (int(page) - 1))


def push_where(clauses: List[str], clause: str, operand: str = DEFAULT_OPERAND) -> int:
    """
    Append a condition to a WHERE clause list.

    The operand is only prefixed when the list already holds a clause.

    Returns:
        The new length of ``clauses``

    Examples:
        >>> where = []
        >>> push_where(where, "a = ?")
        1
        >>> push_where(where, "b = ?", "OR")
        2
        >>> where
        ['a = ?', 'OR b = ?']
    """
    operand = operand or DEFAULT_OPERAND
    clauses.append(f"{operand} {clause}" if clauses else clause)
    return len(clauses)


def _sort_field_and_dir(spec: SortInput) -> tuple:
    if isinstance(spec, SortSpec):
        return spec.field, spec.dir
    return spec.get("field"), spec.get("dir")


def build_order_by(
    sort_specs: Optional[Iterable[SortInput]],
    allowed_fields: Optional[Iterable[str]],
    escape: Callable[[str], str] = escape_identifier,
) -> List[str]:
    """
    Build ORDER BY items from user supplied sort specs.

    Specs whose field is not a string listed in ``allowed_fields`` are
    dropped. Direction defaults to DESC; anything other than ``desc`` (any case) becomes ASC.

    Examples:
        >>> build_order_by([{"field": "name", "dir": "asc"}], ["name"])
        ['`name` ASC']
        >>> build_order_by([{"field": "id"}, {"field": "pw"}], ["id"])
        ['`id` DESC']
    """
    allowed = list(allowed_fields or [])
    order = []
    for spec in sort_specs or []:
        field, direction = _sort_field_and_dir(spec)
        if not isinstance(field, str) or field not in allowed:
            continue
        direction = "DESC" if (direction or DEFAULT_DIRECTION).upper() == "DESC" else "ASC"
        order.append(f"{escape(field)} {direction}")
    return order


def build_select_ordered(
    fields: Union[str, Sequence[str]],
    tables: Union[str, Sequence[str]],
    where: Optional[Sequence[str]] = None,
    order: Optional[Sequence[str]] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    group_by: Optional[Sequence[str]] = None,
) -> str:
    """
    Build a SELECT statement.

    Args:
        fields: Projection items, joined with ``", "``
        tables: Table references, joined with spaces (JOIN text allowed)
        where: WHERE clauses (see ``push_where``), joined with spaces
        order: ORDER BY items (see ``build_order_by``)
        limit: Row count; only used together with ``offset``
        offset: Row offset; only used together with ``limit``
        group_by: GROUP BY items, joined with spaces

    Returns:
        SELECT SQL statement

    Examples:
        >>> build_select_ordered(["a", "b"], ["t"], ["x=1"], limit=5, offset=0)
        'SELECT a, b FROM t WHERE x=1 LIMIT 0, 5'
    """
    sql = ["SELECT", ", ".join(_as_list(fields)), "FROM", " ".join(_as_list(tables))]

    where = _as_list(where)
    if where:
        sql.extend(["WHERE", " ".join(where)])

    group_by = _as_list(group_by)
    if group_by:
        sql.extend(["GROUP BY", " ".join(group_by)])

    order = _as_list(order)
    if order:
        sql.extend(["ORDER BY", ", ".join(order)])

    if limit is not None and offset is not None:
        sql.append(build_limit_clause(limit, offset))

    return " ".join(sql)


def build_select_paged(
    fields: Union[str, Sequence[str]],
    tables: Union[str, Sequence[str]],
    where: Optional[Sequence[str]] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    group_by: Optional[Sequence[str]] = None,
) -> str:
    """Build an unordered SELECT statement with an optional LIMIT."""
    return build_select_ordered(fields, tables, where, None, limit, offset, group_by)


def build_select(
    fields: Union[str, Sequence[str]],
    tables: Union[str, Sequence[str]],
    where: Optional[Sequence[str]] = None,
    order: Any = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    group_by: Optional[Sequence[str]] = None,
) -> str:
    """
    Positional form of ``build_select_ordered``.

    When a number is passed in the ``order`` slot it is taken as the limit and
    ``limit`` as the offset, so ``build_select(f, t, w, 10, 0)`` still pages.
    Prefer the two named builders in new code.

    Examples:
        >>> build_select(["a"], ["t"], [], 10, 0)
        'SELECT a FROM t LIMIT 0, 10'
    """
    if isinstance(order, (int, float)) and not isinstance(order, bool):
        return build_select_paged(fields, tables, where, order, limit, group_by)
    return build_select_ordered(fields, tables, where, order, limit, offset, group_by)
