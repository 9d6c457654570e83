"""
Pydantic schemas for request/response validation.

Import all schemas here for easy access.
"""

from lifestyle_cms.schemas.carousel import (
    CarouselCreate,
    CarouselItemCreate,
    CarouselItemResponse,
    CarouselItemUpdate,
    CarouselResponse,
    CarouselUpdate,
    DataResponse,
    DetachResponse,
    HeaderUpsert,
    MembershipResponse,
    MembershipSet,
    MoveRequest,
    PageItemResponse,
    ReorderRequest,
    SingletonSet,
    SlotResponse,
)

__all__ = [
    # Envelope
    "DataResponse",
    # Carousels
    "CarouselCreate",
    "CarouselUpdate",
    "CarouselResponse",
    "HeaderUpsert",
    # Items
    "CarouselItemCreate",
    "CarouselItemUpdate",
    "CarouselItemResponse",
    "PageItemResponse",
    "ReorderRequest",
    "MoveRequest",
    # Slots & memberships
    "SingletonSet",
    "SlotResponse",
    "MembershipSet",
    "MembershipResponse",
    "DetachResponse",
]
