from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException

from metaindex.api.middleware import RequestContextMiddleware
from metaindex.api.models import CheckReportOut, HealthOut, TagsOut, TemplateListOut
from metaindex.core.index import (
    DEFAULT_INDEX_FILE,
    Diagnostics,
    IndexFileNotFoundError,
    MetaIndexError,
    check_records,
    dedupe_and_sort,
    load_index,
    logging_sink,
)
from metaindex.core.index.loader import LoadedIndex

log = logging.getLogger("metaindex.api")


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Configuration for the catalog API.

    The index is re-read on every request, so edits on disk show up without
    a restart.
    """

    index_path: str = DEFAULT_INDEX_FILE


def create_app(*, index_path: Optional[str] = None) -> FastAPI:
    """Create the FastAPI app."""

    cfg = ServiceConfig(
        index_path=index_path or os.environ.get("METAINDEX_INDEX") or DEFAULT_INDEX_FILE,
    )
    log.setLevel(os.environ.get("METAINDEX_LOG_LEVEL", "INFO").upper())

    app = FastAPI(title="metaindex catalog API", version="0.1")
    app.state.cfg = cfg
    app.add_middleware(RequestContextMiddleware)

    diagnostics = Diagnostics(logging_sink(log))

    def _load() -> LoadedIndex:
        """Load the index or raise the matching HTTP error."""

        try:
            return load_index(cfg.index_path)
        except IndexFileNotFoundError:
            raise HTTPException(status_code=404, detail="index_not_found")
        except MetaIndexError as e:
            log.warning("invalid index %s: %s", cfg.index_path, e)
            raise HTTPException(status_code=422, detail="invalid_index")

    def _templates() -> List[Dict[str, Any]]:
        loaded = _load()
        return dedupe_and_sort(loaded.records, validate_schema=False, diagnostics=diagnostics).unique

    @app.get("/health", response_model=HealthOut)
    def health() -> HealthOut:
        return HealthOut(index_path=cfg.index_path)

    @app.get("/templates", response_model=TemplateListOut)
    def list_templates() -> TemplateListOut:
        templates = _templates()
        return TemplateListOut(count=len(templates), templates=templates)

    @app.get("/templates/{template_id}")
    def get_template(template_id: str) -> Dict[str, Any]:
        for record in _templates():
            if record["id"] == template_id:
                return record
        raise HTTPException(status_code=404, detail="template_not_found")

    @app.get("/tags", response_model=TagsOut)
    def list_tags() -> TagsOut:
        tags = set()
        for record in _templates():
            values = record.get("tags")
            if isinstance(values, list):
                tags.update(t for t in values if isinstance(t, str))
        ordered = sorted(tags)
        return TagsOut(count=len(ordered), tags=ordered)

    @app.get("/report", response_model=CheckReportOut)
    def report() -> CheckReportOut:
        loaded = _load()
        r = check_records(loaded.records, path=loaded.path)
        return CheckReportOut(
            path=r.path,
            entries=r.entries,
            unique=r.unique,
            duplicates=r.duplicates,
            duplicate_ids=list(r.duplicate_ids),
            is_sorted=r.is_sorted,
            clean=r.clean,
        )

    return app
