"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Query, Request

from oversight.config import ScoringPolicy


def get_policy(request: Request) -> ScoringPolicy:
    """Scoring policy configured for this application."""
    return request.app.state.settings.scoring


@dataclass
class PageParams:
    page: int
    limit: int


def page_params(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=200),
) -> PageParams:
    """Pagination query parameters, defaulting the limit from settings."""
    return PageParams(page=page, limit=limit or request.app.state.settings.default_page_size)
