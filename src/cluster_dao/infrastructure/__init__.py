"""
Infrastructure Layer

Pure helpers with no connection state.

Components:
- sql: SQL fragment and statement builders, escaping and ``?``/``??`` templates
- normalization: Row to record reshaping and timestamp coercion

Usage:
    from cluster_dao.infrastructure.sql import build_select, push_where
    from cluster_dao.infrastructure.normalization import RecordNormalizer
"""

__all__: list[str] = []
