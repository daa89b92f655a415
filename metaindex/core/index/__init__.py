"""meta.json index maintenance.

The index is a JSON array of template records keyed by ``id``. This package
dedupes, validates, sorts and rewrites it.

Notes:
- Records are passed through untouched; only their order and membership change.
- Fatal errors are raised before anything is written.
"""

from .check import CheckReport, check_index, check_records
from .config import DEFAULT_INDEX_FILE, ProcessorConfig
from .dedupe import DedupeResult, DuplicateEntry, SkippedEntry, dedupe_and_sort, sort_key
from .diagnostics import Diagnostics, LogSink, RecordingSink, logging_sink
from .errors import (
    IndexFileNotFoundError,
    IndexIOError,
    InvalidIndexJSONError,
    InvalidIndexShapeError,
    MetaIndexError,
)
from .formatting import format_index_json, is_compact_array
from .loader import LoadedIndex, load_index
from .processor import MetaProcessor, ProcessOutcome, ProcessSummary, backup_path_for
from .schema import REQUIRED_FIELDS, SchemaReport, check_record_schema, is_truthy

__all__ = [
    "CheckReport",
    "check_index",
    "check_records",
    "DEFAULT_INDEX_FILE",
    "ProcessorConfig",
    "DedupeResult",
    "DuplicateEntry",
    "SkippedEntry",
    "dedupe_and_sort",
    "sort_key",
    "Diagnostics",
    "LogSink",
    "RecordingSink",
    "logging_sink",
    "IndexFileNotFoundError",
    "IndexIOError",
    "InvalidIndexJSONError",
    "InvalidIndexShapeError",
    "MetaIndexError",
    "format_index_json",
    "is_compact_array",
    "LoadedIndex",
    "load_index",
    "MetaProcessor",
    "ProcessOutcome",
    "ProcessSummary",
    "backup_path_for",
    "REQUIRED_FIELDS",
    "SchemaReport",
    "check_record_schema",
    "is_truthy",
]
