"""Core SQL utilities package."""

from .identifier import bare_field_name, escape_identifier, quote_identifier
from .parameters import (
    QueryFragment,
    as_clause_list,
    as_value_list,
    escape_value,
    format_template,
)

__all__ = [
    "quote_identifier",
    "escape_identifier",
    "bare_field_name",
    "QueryFragment",
    "escape_value",
    "format_template",
    "as_value_list",
    "as_clause_list",
]
