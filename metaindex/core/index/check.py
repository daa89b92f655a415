from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Sequence, Tuple, Union

from .dedupe import sort_key
from .loader import load_index


@dataclass(frozen=True)
class CheckReport:
    """Read-only view of whether an index still needs processing."""

    path: str
    entries: int
    unique: int
    duplicates: int
    duplicate_ids: Tuple[str, ...]
    is_sorted: bool

    @property
    def clean(self) -> bool:
        return self.duplicates == 0 and self.is_sorted


def check_records(records: Sequence[Any], *, path: str = "") -> CheckReport:
    """Report duplicates and sort order; records without a string id are ignored."""

    ids: List[str] = [
        r["id"] for r in records if isinstance(r, dict) and isinstance(r.get("id"), str) and r["id"]
    ]

    seen: set[str] = set()
    dup_ids: List[str] = []
    for rid in ids:
        if rid in seen and rid not in dup_ids:
            dup_ids.append(rid)
        seen.add(rid)

    keys = [sort_key(rid) for rid in ids]
    is_sorted = all(a <= b for a, b in zip(keys, keys[1:]))

    return CheckReport(
        path=path,
        entries=len(records),
        unique=len(seen),
        duplicates=len(ids) - len(seen),
        duplicate_ids=tuple(dup_ids),
        is_sorted=is_sorted,
    )


def check_index(path: Union[str, Path]) -> CheckReport:
    """Load an index and report on it without writing anything."""

    loaded = load_index(path)
    return check_records(loaded.records, path=loaded.path)
