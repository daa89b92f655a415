from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .diagnostics import Diagnostics
from .schema import check_record_schema, display_name, is_truthy


@dataclass(frozen=True)
class DuplicateEntry:
    """A record dropped because its id was already accepted."""

    id: str
    name: str
    original_index: int


@dataclass(frozen=True)
class SkippedEntry:
    """A record dropped because it is not an object or has no usable id."""

    index: int
    reason: str
    name: str


@dataclass(frozen=True)
class DedupeResult:
    """In-memory outcome of dedupe + sort over one index."""

    original: int
    duplicates_removed: int
    final: int
    duplicates: Tuple[DuplicateEntry, ...]
    skipped: Tuple[SkippedEntry, ...]
    unique: List[Dict[str, Any]]
    schema_violations: int


def sort_key(record_id: str) -> bytes:
    """Case-insensitive ordinal key over UTF-16 code units.

    Big-endian UTF-16 bytes compare exactly like their 16-bit code units.
    """

    return record_id.lower().encode("utf-16-be", "surrogatepass")


def dedupe_and_sort(
    records: Sequence[Any],
    *,
    validate_schema: bool = True,
    diagnostics: Optional[Diagnostics] = None,
) -> DedupeResult:
    """Drop invalid and duplicate records, then sort the rest by id.

    Rules, applied to each element in order:
    - non-objects and records without a truthy string ``id`` are skipped and
      counted as schema violations
    - with ``validate_schema``, records missing required fields are counted
      as violations but kept
    - the first record with a given ``id`` wins; later ones are reported as
      duplicates (the dedupe key is case-sensitive)

    Accepted records are returned unmodified, stably sorted by lower-cased id.
    """

    diag = diagnostics or Diagnostics()
    seen: set[str] = set()
    duplicates: List[DuplicateEntry] = []
    skipped: List[SkippedEntry] = []
    unique: List[Dict[str, Any]] = []
    violations = 0

    for index, item in enumerate(records):
        if not isinstance(item, Mapping):
            diag.warning(f"Skipping invalid item at index {index}")
            skipped.append(SkippedEntry(index=index, reason="not_an_object", name="Unknown"))
            violations += 1
            continue

        name = display_name(item)
        record_id = item.get("id")
        if not is_truthy(record_id):
            diag.warning(f"Skipping item without ID at index {index}: {name}")
            skipped.append(SkippedEntry(index=index, reason="missing_id", name=name))
            violations += 1
            continue
        if not isinstance(record_id, str):
            diag.warning(f"Skipping item with non-string ID at index {index}: {name}")
            skipped.append(SkippedEntry(index=index, reason="non_string_id", name=name))
            violations += 1
            continue

        if validate_schema:
            report = check_record_schema(item)
            if not report.ok:
                diag.warning(
                    f"Item at index {index} missing required fields: {', '.join(report.missing)}"
                )
                violations += 1
            for issue in report.issues:
                diag.warning(issue)

        if record_id in seen:
            duplicates.append(DuplicateEntry(id=record_id, name=name, original_index=index))
            diag.warning(f'Duplicate ID found: "{record_id}" ({name})')
            continue

        seen.add(record_id)
        unique.append(item)

    # list.sort is stable, so equal keys keep their input order.
    unique.sort(key=lambda r: sort_key(r["id"]))

    return DedupeResult(
        original=len(records),
        duplicates_removed=len(duplicates),
        final=len(unique),
        duplicates=tuple(duplicates),
        skipped=tuple(skipped),
        unique=unique,
        schema_violations=violations,
    )
