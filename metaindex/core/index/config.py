from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_INDEX_FILE = "meta.json"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable; unknown values fall back to default."""

    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


def _env_str(name: str) -> Optional[str]:
    raw = os.environ.get(name, "").strip()
    return raw or None


@dataclass(frozen=True, slots=True)
class ProcessorConfig:
    """Options for one normalization run.

    ``output_file`` of ``None`` means the input file is rewritten in place.
    """

    input_file: str = DEFAULT_INDEX_FILE
    output_file: Optional[str] = None
    create_backup: bool = False
    validate_schema: bool = True
    verbose: bool = False
    exit_on_error: bool = True

    @property
    def resolved_output(self) -> str:
        return self.output_file or self.input_file

    @classmethod
    def from_env(cls) -> "ProcessorConfig":
        """Build a config from METAINDEX_* environment variables."""

        return cls(
            input_file=_env_str("METAINDEX_INPUT") or DEFAULT_INDEX_FILE,
            output_file=_env_str("METAINDEX_OUTPUT"),
            create_backup=_env_bool("METAINDEX_BACKUP", False),
            validate_schema=_env_bool("METAINDEX_VALIDATE_SCHEMA", True),
            verbose=_env_bool("METAINDEX_VERBOSE", False),
            exit_on_error=_env_bool("METAINDEX_EXIT_ON_ERROR", True),
        )
