from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

REQUIRED_FIELDS: Tuple[str, ...] = (
    "id",
    "name",
    "version",
    "description",
    "links",
    "logo",
    "tags",
)

UNKNOWN_NAME = "Unknown"


def is_truthy(value: Any) -> bool:
    """Truthiness as the index's JavaScript consumers see it.

    ``None``, ``False``, ``0``, ``NaN`` and ``""`` are falsy. Empty lists and
    empty objects are truthy, unlike in Python.
    """

    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def display_name(record: Mapping[str, Any]) -> str:
    """Name used in diagnostics; ``"Unknown"`` when absent or falsy."""

    name = record.get("name")
    return str(name) if is_truthy(name) else UNKNOWN_NAME


@dataclass(frozen=True)
class SchemaReport:
    """Outcome of checking one record against the required-field schema.

    ``missing`` makes the record a schema violation. ``issues`` are shape
    warnings that are logged but never counted.
    """

    missing: Tuple[str, ...] = ()
    issues: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.missing


def check_record_schema(record: Mapping[str, Any]) -> SchemaReport:
    """Check a record for required fields and the shape of links/tags.

    Shape checks only run when no required field is missing.
    """

    missing = tuple(f for f in REQUIRED_FIELDS if not is_truthy(record.get(f)))
    if missing:
        return SchemaReport(missing=missing)

    issues = []
    links = record.get("links")
    if not isinstance(links, Mapping) or not is_truthy(links.get("github")):
        issues.append(f'Item "{record.get("id")}" has invalid links structure')
    if not isinstance(record.get("tags"), list):
        issues.append(f'Item "{record.get("id")}" has invalid tags (should be array)')
    return SchemaReport(issues=tuple(issues))
