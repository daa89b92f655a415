from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping


def to_jsonable(obj: Any) -> Any:
    """
    Convert summaries and reports to JSON-serializable structures.

    Dataclasses become dicts (properties are not included), tuples and sets
    become lists, exceptions become their message.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, Enum):
        return to_jsonable(obj.value)

    if isinstance(obj, Path):
        return str(obj)

    if isinstance(obj, BaseException):
        return {"type": type(obj).__name__, "message": str(obj)}

    # shallow walk so nested dataclasses go through the same rules
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}

    if isinstance(obj, Mapping):
        return {str(k): to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(x) for x in obj]

    return str(obj)
