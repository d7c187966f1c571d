"""Domain error hierarchy shared by the pipeline, the stores and the API layer."""

from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from docgraph.config.logger import app_logger

F = TypeVar("F", bound=Callable[..., Any])


class DocGraphError(Exception):
    """Base exception carrying a message and a details dict."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(DocGraphError):
    """A document, chunk, message, node or file does not exist."""
    pass


class InvalidInputError(DocGraphError):
    """Caller supplied an empty, malformed or out-of-range value."""
    pass


class EmptyDocumentError(InvalidInputError):
    """A source file exists but holds no bytes."""
    pass


class ConflictError(DocGraphError):
    """A uniqueness rule was violated."""
    pass


class UpstreamError(DocGraphError):
    """The embedding provider, chat model or a store failed."""
    pass


class UnsupportedError(DocGraphError):
    """The file type or provider is not supported."""
    pass


class ProcessingError(DocGraphError):
    """A pipeline stage produced nothing usable."""
    pass


def log_errors(func: F) -> F:
    """Decorator for async callables: log domain errors with details, wrap anything else."""

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except DocGraphError as e:
            app_logger.error(f"Error in {func.__name__}: {e} {e.details}")
            raise
        except Exception as e:
            app_logger.exception(f"Unexpected error in {func.__name__}: {e}")
            raise ProcessingError(f"Unexpected error: {e}", {"error_type": type(e).__name__}) from e

    return wrapper  # type: ignore[return-value]
