"""
Carousel error types and store-error translation.

Every failure a carousel operation can report is a CarouselError carrying
a machine-readable `code` and the HTTP status the API layer answers with.
Lookups that are expected to miss (find_by_page_slug) return None instead
of raising.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.core.logging import get_logger
from lifestyle_cms.db.deps import DBTransaction

logger = get_logger(__name__)


class CarouselError(Exception):
    """Base exception for carousel operations."""

    code = "carousel_error"
    status_code = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.details}


class CarouselNotFoundError(CarouselError):
    """Raised when a carousel id does not exist."""

    code = "carousel_not_found"
    status_code = 404


class CarouselItemNotFoundError(CarouselError):
    """Raised when a carousel item id does not exist."""

    code = "carousel_item_not_found"
    status_code = 404


class UnknownKindError(CarouselError):
    """Raised when an item kind is not in the registry."""

    code = "unknown_kind"
    status_code = 422

    def __init__(self, kind: Any):
        super().__init__(f"Unknown carousel item kind: {kind!r}", kind=str(kind))


class MissingReferenceError(CarouselError):
    """Raised when the reference field a kind requires was not supplied."""

    code = "missing_reference"
    status_code = 422

    def __init__(self, kind: str, field: str):
        super().__init__(
            f"Carousel item of kind '{kind}' requires '{field}'",
            kind=kind,
            field=field,
        )


class ReferenceTooLongError(CarouselError):
    """Raised when a reference does not fit the column its kind stores it in."""

    code = "reference_too_long"
    status_code = 422

    def __init__(self, kind: str, field: str, max_length: int):
        super().__init__(
            f"Reference for kind '{kind}' exceeds {max_length} characters",
            kind=kind,
            field=field,
            max_length=max_length,
        )


class ConstraintViolationError(CarouselError):
    """Raised when the store rejects a write (uniqueness or reference check)."""

    code = "constraint_violation"
    status_code = 409


class UnknownPageError(CarouselError):
    """Raised when a page is not one of the site sections."""

    code = "unknown_page"
    status_code = 422

    def __init__(self, page: Any):
        super().__init__(f"Unknown page: {page!r}", page=str(page))


class SlotCardinalityError(CarouselError):
    """Raised when a singleton-only operation targets an ordered carousel, or the reverse."""

    code = "slot_cardinality"
    status_code = 409


class StoreUnavailableError(CarouselError):
    """Raised when the store cannot be reached or fails for a non-constraint reason."""

    code = "store_unavailable"
    status_code = 503


def translate_store_error(exc: SQLAlchemyError, operation: str) -> CarouselError:
    """Map a SQLAlchemy exception to the matching CarouselError."""
    if isinstance(exc, (IntegrityError, DataError)):
        return ConstraintViolationError(
            f"{operation} rejected by the store: {exc.orig}",
            operation=operation,
        )
    return StoreUnavailableError(
        f"{operation} failed: {type(exc).__name__}",
        operation=operation,
    )


@asynccontextmanager
async def store_operation(
    session: AsyncSession,
    operation: str,
    **context: Any,
) -> AsyncIterator[AsyncSession]:
    """
    Run a group of statements as one committed unit of work.

    On any failure the transaction is rolled back and SQLAlchemy errors
    come out as ConstraintViolationError / StoreUnavailableError, so a
    composite operation never leaves half its writes behind.

    Usage:
        async with store_operation(self.db, "set_singleton", carousel_id=cid):
            await self.db.execute(delete(...))
            self.db.add(CarouselItem(...))
    """
    try:
        async with DBTransaction(session):
            yield session
    except SQLAlchemyError as e:
        logger.error(
            "store_operation_failed",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
            **context,
        )
        raise translate_store_error(e, operation) from e


@asynccontextmanager
async def store_read(operation: str, **context: Any) -> AsyncIterator[None]:
    """Translate SQLAlchemy errors raised by a read into StoreUnavailableError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            "store_read_failed",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
            **context,
        )
        raise translate_store_error(e, operation) from e


__all__ = [
    "CarouselError",
    "CarouselNotFoundError",
    "CarouselItemNotFoundError",
    "UnknownKindError",
    "MissingReferenceError",
    "ReferenceTooLongError",
    "ConstraintViolationError",
    "UnknownPageError",
    "SlotCardinalityError",
    "StoreUnavailableError",
    "translate_store_error",
    "store_operation",
    "store_read",
]
