"""
SQL module for centralized SQL generation.

This module provides reusable utilities for building SQL statements with
proper identifier quoting, value escaping and ``?``/``??`` templates that are
rendered by the connection layer.
"""

from .core.identifier import bare_field_name, escape_identifier, quote_identifier
from .core.parameters import QueryFragment, escape_value, format_template
from .dialects.mysql import MySQLDialect
from .operations.select import (
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
from .operations.write import WriteBuilder

__all__ = [
    "quote_identifier",
    "escape_identifier",
    "bare_field_name",
    "QueryFragment",
    "escape_value",
    "format_template",
    "MySQLDialect",
    "WriteBuilder",
    "SortSpec",
    "render_field_list",
    "build_select",
    "build_select_ordered",
    "build_select_paged",
    "build_limit_clause",
    "build_offset_clause",
    "push_where",
    "build_order_by",
]
