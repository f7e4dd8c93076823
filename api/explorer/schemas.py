"""
Pydantic schemas for explorer endpoints.

Upstream GitHub objects are passed through as-is, so items stay loosely
typed (`dict`) and unknown fields are preserved.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str


class SearchRepositoriesResponse(BaseModel):
    total_count: int
    incomplete_results: bool
    items: list[dict[str, Any]]
