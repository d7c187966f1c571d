"""Response envelopes shared by every /v1 router.

Successful calls wrap their payload in ``SuccessResponse``; list endpoints use
``PaginatedResponse`` whether they page by ``page``/``per_page`` or by ``limit``/``offset``;
failures raised as ``DocGraphError`` are rendered as ``ErrorResponse`` by the API error handler.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from docgraph.config.settings import settings

T = TypeVar("T")


class ResponseMetadata(BaseModel):
    service: str = Field(default=settings.APP_NAME)
    version: str = Field(default=settings.APP_VERSION)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str = "OK"
    data: T
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class ErrorResponse(BaseModel):
    """Body returned for a failed request; ``error`` is the exception class name."""

    success: bool = False
    error: str
    detail: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


class PaginationMeta(BaseModel):
    page: int = Field(ge=1)
    limit: int = Field(ge=1, le=100)
    total: int = Field(ge=0)
    pages: int = Field(ge=0)
    has_next: bool
    has_prev: bool

    @classmethod
    def for_page(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        pages = -(-total // limit) if total > 0 else 0
        return cls(page=page, limit=limit, total=total, pages=pages, has_next=page < pages, has_prev=page > 1)

    @classmethod
    def for_offset(cls, offset: int, limit: int, total: int) -> "PaginationMeta":
        """Offsets that do not fall on a page boundary report the page they start in."""
        return cls.for_page(offset // limit + 1, limit, total)


class PaginatedResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str = "OK"
    data: List[T]
    pagination: PaginationMeta
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)


def success_response(data: T, message: str = "OK") -> SuccessResponse[T]:
    return SuccessResponse(data=data, message=message)


def error_response(error: str, detail: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> ErrorResponse:
    return ErrorResponse(error=error, detail=detail, details=details or {})


def paginated_response(
    data: List[T],
    page: int,
    limit: int,
    total: int,
    message: str = "OK",
) -> PaginatedResponse[T]:
    return PaginatedResponse(data=data, pagination=PaginationMeta.for_page(page, limit, total), message=message)


def offset_response(
    data: List[T],
    offset: int,
    limit: int,
    total: int,
    message: str = "OK",
) -> PaginatedResponse[T]:
    """Paginated envelope for endpoints addressed by ``limit``/``offset``."""
    return PaginatedResponse(data=data, pagination=PaginationMeta.for_offset(offset, limit, total), message=message)
