from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class ApiError(BaseModel):
    """Standard API error payload."""

    error: str
    detail: Optional[str] = None


class HealthOut(BaseModel):
    status: str = "ok"
    index_path: str


class TemplateListOut(BaseModel):
    """Normalized templates; records are passed through as stored."""

    count: int
    templates: List[Dict[str, Any]] = Field(default_factory=list)


class TagsOut(BaseModel):
    count: int
    tags: List[str] = Field(default_factory=list)


class CheckReportOut(BaseModel):
    """Whether the index on disk still needs processing."""

    path: str
    entries: int
    unique: int
    duplicates: int
    duplicate_ids: List[str] = Field(default_factory=list)
    is_sorted: bool
    clean: bool
