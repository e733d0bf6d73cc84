"""SQL statement builders package."""

from .select import (
    SortSpec,
    build_limit_clause,
    build_offset_clause,
    build_order_by,
    build_select,
    build_select_ordered,
    build_select_paged,
    push_where,
    render_field_list,
)
from .write import WriteBuilder

__all__ = [
    "SortSpec",
    "render_field_list",
    "build_select",
    "build_select_ordered",
    "build_select_paged",
    "build_limit_clause",
    "build_offset_clause",
    "push_where",
    "build_order_by",
    "WriteBuilder",
]
