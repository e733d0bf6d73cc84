"""Record normalization package."""

from .record_normalizer import TIMESTAMP_FIELDS, ParsedRecord, RecordNormalizer

__all__ = ["RecordNormalizer", "ParsedRecord", "TIMESTAMP_FIELDS"]
