from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

from .errors import (
    IndexFileNotFoundError,
    IndexIOError,
    InvalidIndexJSONError,
    InvalidIndexShapeError,
)


@dataclass(frozen=True)
class LoadedIndex:
    """An index file as read from disk: original bytes plus parsed records."""

    path: str
    raw: bytes
    records: List[Any]


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _reject_constant(token: str) -> Any:
    # NaN / Infinity are not JSON.
    raise ValueError(f"unexpected token {token}")


def _parse_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {token}")
    return value


def _find_lone_surrogate(value: Any) -> Optional[str]:
    """Return the first string (key or value) that cannot be encoded as UTF-8."""

    if isinstance(value, str):
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            return value
        return None
    if isinstance(value, dict):
        for k, v in value.items():
            found = _find_lone_surrogate(k) or _find_lone_surrogate(v)
            if found is not None:
                return found
    elif isinstance(value, list):
        for v in value:
            found = _find_lone_surrogate(v)
            if found is not None:
                return found
    return None


def load_index(path: Union[str, Path]) -> LoadedIndex:
    """Read and parse an index file.

    Raises:
    - IndexFileNotFoundError if the path is not an existing file
    - InvalidIndexJSONError if the bytes are not UTF-8 JSON
    - InvalidIndexShapeError if the top-level value is not an array
    - IndexIOError if the file exists but cannot be read
    """

    p = Path(path)
    if not p.is_file():
        raise IndexFileNotFoundError(f"Input file not found: {path}", path=str(path))

    try:
        raw = p.read_bytes()
    except OSError as e:
        raise IndexIOError(f"Cannot read {path}: {e}", path=str(path)) from e

    try:
        data = json.loads(
            raw.decode("utf-8"), parse_constant=_reject_constant, parse_float=_parse_float
        )
    except ValueError as e:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors.
        raise InvalidIndexJSONError(
            f"Invalid JSON in {path}: {e}", path=str(path), detail=str(e)
        ) from e

    bad = _find_lone_surrogate(data)
    if bad is not None:
        detail = f"lone surrogate in string {bad!r}"
        raise InvalidIndexJSONError(f"Invalid JSON in {path}: {detail}", path=str(path), detail=detail)

    if not isinstance(data, list):
        found = json_type_name(data)
        raise InvalidIndexShapeError(
            f"Expected array in {path}, got {found}", path=str(path), found=found
        )

    return LoadedIndex(path=str(path), raw=raw, records=data)
