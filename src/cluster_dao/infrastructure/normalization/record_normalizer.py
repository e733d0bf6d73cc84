"""
Record normalization between flat result rows and application records.

Result rows arrive as flat mappings whose columns may carry an alias prefix
(``us_name`` for a joined ``users`` table). ``RecordNormalizer`` selects and
renames those columns, formats epoch ``utime``/``ctime`` values, and folds
``addr_city``-style columns into nested objects and back.
"""

import copy
import logging
from datetime import tzinfo
from typing import Any, Dict, Iterable, List, MutableMapping, NamedTuple, Optional, Sequence

from cluster_dao.infrastructure.sql.core.identifier import bare_field_name
from cluster_dao.utils.timestamps import coerce_epoch, resolve_timezone

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("utime", "ctime")

Record = Dict[str, Any]


class ParsedRecord(NamedTuple):
    """Normalized record plus the source columns it did not consume."""

    record: Record
    residual: Record


class RecordNormalizer:
    """
    Reshapes raw rows into application records.

    Args:
        fields: Default field specs used when a call passes none
        tz: Zone for formatted timestamps; the local zone when None

    Example:
        >>> normalizer = RecordNormalizer(["U.us_no", "name"])
        >>> normalizer.select_and_rename({"us_us_no": 1, "us_name": "kim"}, "us_")
        {'us_no': 1, 'name': 'kim'}
    """

    def __init__(self, fields: Optional[Sequence[str]] = None, tz: Optional[tzinfo] = None):
        self.fields: List[str] = list(fields or [])
        self.tz = tz

    @classmethod
    def from_settings(cls, fields: Optional[Sequence[str]] = None, settings=None) -> "RecordNormalizer":
        """Build a normalizer using the configured timestamp zone."""
        if settings is None:
            from cluster_dao.config import get_settings

            settings = get_settings()
        return cls(fields, tz=resolve_timezone(settings.timezone))

    def split_record(
        self,
        record: MutableMapping[str, Any],
        rename_prefix: str = "",
        fields: Optional[Sequence[str]] = None,
        copy_whole_record: bool = False,
    ) -> ParsedRecord:
        """
        Select, rename and coerce fields without touching ``record``.

        For each field spec the bare name is looked up as
        ``rename_prefix + bare`` in ``record``. Present values are copied to the
        bare name; the source key is left out of the residual. A field listed
        twice resolves to the same column, so the last occurrence wins.

        Args:
            record: Source row
            rename_prefix: Alias prefix used in the SELECT projection
            fields: Field specs; the normalizer's defaults when None
            copy_whole_record: Start from a deep copy of ``record`` rather
                than an empty mapping

        Returns:
            ParsedRecord(record=normalized, residual=unconsumed columns)
        """
        fields = self.fields if fields is None else fields
        rename_prefix = rename_prefix or ""

        result: Record = copy.deepcopy(dict(record)) if copy_whole_record else {}
        residual: Record = dict(record)
        seen = set()

        for field in fields:
            name = bare_field_name(field)
            if name in seen:
                logger.debug(f"Duplicate field '{name}' in field list, last one wins")
            seen.add(name)

            source_key = rename_prefix + name
            if source_key in record:
                result[name] = record[source_key]
            residual.pop(source_key, None)

        return ParsedRecord(self.coerce_timestamps(result), residual)

    def select_and_rename(
        self,
        record: MutableMapping[str, Any],
        rename_prefix: str = "",
        fields: Optional[Sequence[str]] = None,
        copy_whole_record: bool = False,
    ) -> Record:
        """Return only the normalized part of ``split_record``."""
        return self.split_record(record, rename_prefix, fields, copy_whole_record).record

    def coerce_timestamps(self, record: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Replace epoch ``utime``/``ctime`` values in place with ISO-8601 strings."""
        for name in TIMESTAMP_FIELDS:
            if name in record:
                record[name] = coerce_epoch(record[name], self.tz)
        return record

    def normalize(self, record: MutableMapping[str, Any]) -> Record:
        """Normalize a full result row against the default fields."""
        return self.select_and_rename(record, "", self.fields, copy_whole_record=True)

    def normalize_many(self, records: List[Any]) -> List[Any]:
        """Normalize every row of ``records`` in place, preserving order."""
        for index, record in enumerate(records):
            records[index] = self.normalize(record)
        return records

    @staticmethod
    def split_nested(
        record: MutableMapping[str, Any], target_key: str, subfields: Iterable[str]
    ) -> MutableMapping[str, Any]:
        """
        Flatten ``record[target_key]`` into ``<target_key>_<name>`` keys.

        Example:
            >>> RecordNormalizer.split_nested({"addr": {"city": "Seoul"}}, "addr", ["city"])
            {'addr_city': 'Seoul'}
        """
        nested = record.get(target_key)
        if nested is None:
            return record

        for name in subfields:
            record[f"{target_key}_{name}"] = nested.get(name)
        del record[target_key]
        return record

    @staticmethod
    def merge_nested(
        record: MutableMapping[str, Any], target_key: str, subfields: Iterable[str]
    ) -> MutableMapping[str, Any]:
        """
        Fold ``<target_key>_<name>`` keys into ``record[target_key]``.

        Example:
            >>> RecordNormalizer.merge_nested({"addr_city": "Seoul"}, "addr", ["city"])
            {'addr': {'city': 'Seoul'}}
        """
        if record.get(target_key) is None:
            record[target_key] = {}

        nested = record[target_key]
        for name in subfields:
            nested[name] = record.pop(f"{target_key}_{name}", None)
        return record
