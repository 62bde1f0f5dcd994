"""Response envelopes shared by every endpoint."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Successful response envelope: ``{success: true, data: ...}``."""

    success: bool = True
    message: str | None = None
    data: DataT


class Page(BaseModel, Generic[DataT]):
    """One page of a list endpoint."""

    items: list[DataT]
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)


def paginate(items: list, page: int, limit: int) -> dict:
    """Slice a list into the page requested by ``page``/``limit``."""
    start = (page - 1) * limit
    return {"items": items[start:start + limit], "page": page, "limit": limit, "total": len(items)}
