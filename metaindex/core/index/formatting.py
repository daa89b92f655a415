from __future__ import annotations

import json
from typing import Any

INDENT: int = 2
COMPACT_MAX_ITEMS: int = 5
COMPACT_MAX_LENGTH: int = 50


def _utf16_len(value: str) -> int:
    return len(value.encode("utf-16-le", "surrogatepass")) // 2


def is_compact_array(value: Any) -> bool:
    """True for short string arrays that are written on a single line.

    At most 5 elements, every element a string shorter than 50 UTF-16 code
    units. The empty array qualifies.
    """

    return (
        isinstance(value, list)
        and len(value) <= COMPACT_MAX_ITEMS
        and all(isinstance(v, str) and _utf16_len(v) < COMPACT_MAX_LENGTH for v in value)
    )


def _scalar(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, allow_nan=False)


def _encode(value: Any, depth: int) -> str:
    if isinstance(value, dict):
        if not value:
            return "{}"
        pad = " " * (INDENT * (depth + 1))
        members = [f"{pad}{_scalar(str(k))}: {_encode(v, depth + 1)}" for k, v in value.items()]
        return "{\n" + ",\n".join(members) + "\n" + " " * (INDENT * depth) + "}"

    if isinstance(value, list):
        if is_compact_array(value):
            return "[" + ", ".join(_scalar(v) for v in value) + "]"
        pad = " " * (INDENT * (depth + 1))
        items = [f"{pad}{_encode(v, depth + 1)}" for v in value]
        return "[\n" + ",\n".join(items) + "\n" + " " * (INDENT * depth) + "]"

    return _scalar(value)


def format_index_json(data: Any) -> str:
    """Serialize an index with 2-space indentation and compact short arrays.

    No trailing newline is added; callers writing files append one.
    """

    return _encode(data, 0)
