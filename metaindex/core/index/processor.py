from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

from .config import ProcessorConfig
from .dedupe import DedupeResult, DuplicateEntry, SkippedEntry, dedupe_and_sort
from .diagnostics import Diagnostics, LogSink
from .errors import IndexIOError, MetaIndexError
from .formatting import format_index_json
from .loader import load_index


@dataclass(frozen=True)
class ProcessSummary:
    """Statistics returned by a successful run."""

    original: int
    duplicates_removed: int
    final: int
    schema_violations: int
    duplicates: Tuple[DuplicateEntry, ...] = ()
    skipped: Tuple[SkippedEntry, ...] = ()
    output_path: Optional[str] = None
    backup_path: Optional[str] = None
    duration_ms: int = 0


@dataclass(frozen=True)
class ProcessOutcome:
    """Either a summary or the fatal error that stopped the run."""

    summary: Optional[ProcessSummary] = None
    error: Optional[MetaIndexError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def backup_path_for(input_file: str, epoch_ms: int) -> str:
    return f"{input_file}.backup.{epoch_ms}"


class MetaProcessor:
    """Normalize a meta.json index: dedupe, validate, sort, rewrite.

    ``run()`` never raises for index errors; it returns a ProcessOutcome.
    ``process()`` applies ``exit_on_error``: on failure it either raises
    ``SystemExit(1)`` or re-raises the typed error.

    All reads and the in-memory transform complete before the first write,
    so a fatal error never leaves a partial output or a backup behind.
    """

    def __init__(
        self,
        config: Optional[ProcessorConfig] = None,
        *,
        sink: Optional[LogSink] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or ProcessorConfig()
        self.diagnostics = Diagnostics(sink, verbose=self.config.verbose)
        self._clock = clock

    def run(self) -> ProcessOutcome:
        try:
            return ProcessOutcome(summary=self._process())
        except MetaIndexError as e:
            self.diagnostics.error(f"Processing failed: {e}")
            return ProcessOutcome(error=e)

    def process(self) -> ProcessSummary:
        outcome = self.run()
        if outcome.error is None and outcome.summary is not None:
            return outcome.summary
        if self.config.exit_on_error:
            raise SystemExit(1)
        raise outcome.error

    def _process(self) -> ProcessSummary:
        cfg = self.config
        diag = self.diagnostics
        start = time.monotonic()
        diag.info(f"Processing {cfg.input_file}...")

        loaded = load_index(cfg.input_file)
        diag.info(f"Found {len(loaded.records)} total entries")

        result = dedupe_and_sort(
            loaded.records, validate_schema=cfg.validate_schema, diagnostics=diag
        )

        # Encode before any write so a serialization failure leaves no trace on disk.
        payload = (format_index_json(result.unique) + "\n").encode("utf-8")

        backup_path = None
        if cfg.create_backup:
            backup_path = backup_path_for(cfg.input_file, int(self._clock() * 1000))
            self._write(Path(backup_path), loaded.raw)
            diag.debug(f"Backup created: {backup_path}")

        output_path = cfg.resolved_output
        self._write(Path(output_path), payload)

        duration_ms = int((time.monotonic() - start) * 1000)
        diag.success(f"Processing completed in {duration_ms}ms")
        self._report(result)

        return ProcessSummary(
            original=result.original,
            duplicates_removed=result.duplicates_removed,
            final=result.final,
            schema_violations=result.schema_violations,
            duplicates=result.duplicates,
            skipped=result.skipped,
            output_path=output_path,
            backup_path=backup_path,
            duration_ms=duration_ms,
        )

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise IndexIOError(f"Cannot write {path}: {e}", path=str(path)) from e

    def _report(self, result: DedupeResult) -> None:
        diag = self.diagnostics
        diag.summary("Statistics:")
        diag.summary(f"  - Original entries: {result.original}")
        diag.summary(f"  - Duplicates removed: {result.duplicates_removed}")
        diag.summary(f"  - Final entries: {result.final}")
        diag.summary(f"  - Schema violations: {result.schema_violations}")

        if result.duplicates:
            diag.summary("Removed duplicates:")
            for dup in result.duplicates:
                diag.summary(f'  - "{dup.id}" ({dup.name})')

        if result.unique:
            diag.summary(f"ID range: {result.unique[0]['id']} ... {result.unique[-1]['id']}")
