"""
Pydantic schemas for carousel API endpoints.

Responses are wrapped in a `{"data": ...}` envelope; failures use the
`{"error": {...}}` envelope produced by the exception handlers in main.py.
"""

from datetime import datetime
from typing import Annotated, Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lifestyle_cms.models.carousel import ItemKind, PageType

T = TypeVar("T")

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class DataResponse(BaseModel, Generic[T]):
    """Success envelope."""

    data: T


# ========================================
# Carousel Schemas
# ========================================

class CarouselCreate(BaseModel):
    """Request schema for creating (or finding-or-creating) a carousel."""

    page: PageType = Field(..., description="Site section", examples=["storefront"])

    slug: str = Field(
        ...,
        description="Carousel name, unique within its page",
        min_length=1,
        max_length=100,
        pattern=SLUG_PATTERN,
        examples=["storefront-favorites", "recipes-weekly-pick"]
    )

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None)
    is_active: bool = Field(True, description="Hidden from pages when false")


class CarouselUpdate(BaseModel):
    """Partial update; only fields present in the body are written."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("is_active")
    @classmethod
    def reject_null_flag(cls, v: Optional[bool]) -> Optional[bool]:
        if v is None:
            raise ValueError("is_active cannot be null")
        return v


class HeaderUpsert(BaseModel):
    """Section heading for a (page, slug) carousel, created on first use."""

    page: PageType
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class CarouselResponse(BaseModel):
    """Response schema for a carousel."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    page: PageType
    slug: str
    title: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ========================================
# Carousel Item Schemas
# ========================================

class _ItemCreateBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    carousel_id: int = Field(..., description="Owning carousel")

    reference: Optional[str] = Field(
        None,
        description="Reference value; alternative to naming the kind's own column"
    )

    order_index: Optional[int] = Field(
        None,
        ge=0,
        description="Position in the carousel; defaults to the end"
    )

    is_active: bool = True
    is_featured: Optional[bool] = None
    caption: Optional[str] = Field(None, max_length=255)
    image_path: Optional[str] = Field(None, max_length=500)
    badge: Optional[str] = Field(None, max_length=50)


class VideoItemCreate(_ItemCreateBase):
    kind: Literal["video"]
    youtube_id: Optional[str] = Field(None, max_length=100)


class AlbumItemCreate(_ItemCreateBase):
    kind: Literal["album"]
    album_id: Optional[str] = Field(None, max_length=100)


class RefItemCreate(_ItemCreateBase):
    """recipe / product / playlist items, all keyed by ref_id."""

    kind: Literal["recipe", "product", "playlist"]
    ref_id: Optional[str] = Field(None, max_length=100)


class LinkItemCreate(_ItemCreateBase):
    """tiktok / external items, keyed by link_url."""

    kind: Literal["tiktok", "external"]
    link_url: Optional[str] = Field(None, max_length=500)


# Each variant only accepts the reference column its kind uses
CarouselItemCreate = Annotated[
    Union[VideoItemCreate, AlbumItemCreate, RefItemCreate, LinkItemCreate],
    Field(discriminator="kind"),
]


def reference_fields_of(body: _ItemCreateBase) -> Dict[str, Optional[str]]:
    """The kind-specific reference column(s) present on a create body."""
    return {
        name: getattr(body, name)
        for name in ("youtube_id", "album_id", "ref_id", "link_url")
        if name in type(body).model_fields
    }


class CarouselItemUpdate(BaseModel):
    """
    Partial update of an item.

    Changing `kind` or a reference column re-validates the pair against
    the item kind registry.
    """

    model_config = ConfigDict(extra="forbid")

    kind: Optional[ItemKind] = None
    reference: Optional[str] = None
    youtube_id: Optional[str] = Field(None, max_length=100)
    album_id: Optional[str] = Field(None, max_length=100)
    ref_id: Optional[str] = Field(None, max_length=100)
    link_url: Optional[str] = Field(None, max_length=500)
    order_index: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    caption: Optional[str] = Field(None, max_length=255)
    image_path: Optional[str] = Field(None, max_length=500)
    badge: Optional[str] = Field(None, max_length=50)

    @field_validator("kind", "order_index", "is_active")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("field cannot be null")
        return v


class CarouselItemResponse(BaseModel):
    """Response schema for a carousel item."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    carousel_id: int
    kind: ItemKind
    reference: Optional[str] = Field(None, description="Value of the kind's reference column")
    youtube_id: Optional[str] = None
    album_id: Optional[str] = None
    ref_id: Optional[str] = None
    link_url: Optional[str] = None
    order_index: int
    is_active: bool
    is_featured: Optional[bool] = None
    caption: Optional[str] = None
    image_path: Optional[str] = None
    badge: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PageItemResponse(CarouselItemResponse):
    """Item as a page renders it, tagged with its carousel's key."""

    page: PageType
    slug: str
    carousel_title: Optional[str] = None


class ReorderRequest(BaseModel):
    """Ids in their new order; items not listed keep their relative order after them."""

    item_ids: List[int] = Field(..., min_length=1)


class MoveRequest(BaseModel):
    """Target carousel for an item move."""

    page: PageType
    slug: str = Field(..., min_length=1, max_length=100)
    order_index: Optional[int] = Field(None, ge=0)


# ========================================
# Slot & Membership Schemas
# ========================================

class SingletonSet(BaseModel):
    """The item that should occupy a singleton slot."""

    kind: ItemKind
    reference: str = Field(..., min_length=1, max_length=500)
    caption: Optional[str] = Field(None, max_length=255)
    image_path: Optional[str] = Field(None, max_length=500)


class SlotResponse(BaseModel):
    page: PageType
    slug: str
    item: Optional[CarouselItemResponse] = None


class MembershipSet(BaseModel):
    """Toggle body; kind defaults to the page's usual member kind."""

    on: bool
    kind: Optional[ItemKind] = None
    order_index: Optional[int] = Field(None, ge=0)
    caption: Optional[str] = Field(None, max_length=255)
    image_path: Optional[str] = Field(None, max_length=500)


class MembershipResponse(BaseModel):
    domain_id: str
    is_member: bool
    changed: bool = False
    item: Optional[CarouselItemResponse] = None


class DetachResponse(BaseModel):
    """Items removed per carousel id."""

    kind: ItemKind
    reference: str
    removed: Dict[int, int] = Field(default_factory=dict)
