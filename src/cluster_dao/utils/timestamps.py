"""
Epoch timestamp helpers.

Rows store ``utime``/``ctime`` as seconds since the Unix epoch; records handed
to the application carry ISO-8601 strings with a UTC offset instead.
"""

import time
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

EpochValue = Union[int, float, Decimal, str]


def unix() -> int:
    """Return the current Unix timestamp in whole seconds."""
    return int(time.time())


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Return a ZoneInfo for ``name``, or None for the local zone."""
    return ZoneInfo(name) if name else None


def format_unix(value: EpochValue, tz: Optional[tzinfo] = None) -> str:
    """
    Format epoch seconds as ISO-8601 with offset, second precision.

    Args:
        value: Seconds since the epoch (numeric or numeric string)
        tz: Target zone; the local zone when None

    Returns:
        Formatted date-time string

    Examples:
        >>> format_unix(0, ZoneInfo("UTC"))
        '1970-01-01T00:00:00+00:00'
        >>> format_unix("86400", ZoneInfo("Asia/Seoul"))
        '1970-01-02T09:00:00+09:00'
    """
    seconds = int(float(value))
    if tz is None:
        moment = datetime.fromtimestamp(seconds).astimezone()
    else:
        moment = datetime.fromtimestamp(seconds, tz=tz)
    return moment.isoformat(timespec="seconds")


def coerce_epoch(value: Any, tz: Optional[tzinfo] = None) -> Any:
    """
    Format ``value`` when it holds epoch seconds; return anything else unchanged.

    ``None`` (SQL NULL) and already formatted strings pass through.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.astimezone(tz)
        return moment.isoformat(timespec="seconds")
    if isinstance(value, (int, float, Decimal)):
        return format_unix(value, tz)
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return value
        return format_unix(value, tz)
    return value
