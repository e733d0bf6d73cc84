"""Shared utilities."""

from .timestamps import coerce_epoch, format_unix, resolve_timezone, unix

__all__ = ["unix", "format_unix", "coerce_epoch", "resolve_timezone"]
