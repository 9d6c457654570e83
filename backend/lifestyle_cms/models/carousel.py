"""
Carousel Models

Every page section of the site (hero videos, photo albums, product grids,
favorites, playlists, TikTok embeds, recipe of the week) is one Carousel
holding an ordered list of CarouselItems.

Models Included:
----------------
1. Carousel - a named content slot, unique per (page, slug)
2. CarouselItem - one member of a carousel, pointing at exactly one
   backing entity through the reference column its kind dictates
3. PageType (Enum) - site sections a carousel can live on
4. ItemKind (Enum) - what a carousel item points at

Database Tables:
----------------
- carousels
- carousel_items (carousel_id → carousels.id, ON DELETE CASCADE)

Relationships:
--------------
- Carousel (1) ←→ (Many) CarouselItem, exclusively owned
- CarouselItem → recipe / product / album / playlist: by identifier only,
  no foreign key (those entities live in other services)
"""

import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lifestyle_cms.db.base import BaseModel, String50, String100, String255, String500


# ================================
# Enums
# ================================

class PageType(str, enum.Enum):
    """Site sections that own carousels."""

    HOME = "home"
    VLOGS = "vlogs"
    RECIPES = "recipes"
    HEALING = "healing"
    STOREFRONT = "storefront"

    def __str__(self) -> str:
        return self.value


class ItemKind(str, enum.Enum):
    """
    What a carousel item points at.

    Kind → reference column:
    ------------------------
    video              → youtube_id (platform video id)
    album              → album_id
    recipe / product /
    playlist           → ref_id
    tiktok / external  → link_url
    """

    VIDEO = "video"
    ALBUM = "album"
    RECIPE = "recipe"
    PRODUCT = "product"
    PLAYLIST = "playlist"
    TIKTOK = "tiktok"
    EXTERNAL = "external"

    def __str__(self) -> str:
        return self.value


# Reference columns, in a fixed order
REFERENCE_FIELDS: tuple[str, ...] = ("youtube_id", "album_id", "ref_id", "link_url")

# Which reference column each kind populates; kind decides, callers don't
REFERENCE_FIELD_BY_KIND: dict[ItemKind, str] = {
    ItemKind.VIDEO: "youtube_id",
    ItemKind.ALBUM: "album_id",
    ItemKind.RECIPE: "ref_id",
    ItemKind.PRODUCT: "ref_id",
    ItemKind.PLAYLIST: "ref_id",
    ItemKind.TIKTOK: "link_url",
    ItemKind.EXTERNAL: "link_url",
}


def _single_reference_check() -> str:
    """SQL for: the kind's own reference column is set and every other one is NULL."""
    clauses = []
    for kind, field in REFERENCE_FIELD_BY_KIND.items():
        others = " AND ".join(f"{other} IS NULL" for other in REFERENCE_FIELDS if other != field)
        clauses.append(f"(kind = '{kind.value}' AND {field} IS NOT NULL AND {others})")
    return " OR ".join(clauses)


def _enum_column(enum_cls: type[enum.Enum], name: str) -> Enum:
    # Stored as VARCHAR holding the enum value ("recipe"), portable across stores
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda members: [member.value for member in members],
    )


# ================================
# Carousel Model
# ================================

class Carousel(BaseModel):
    """
    A named, orderable content slot on one page.

    Table: carousels
    ----------------
    Identified by (page, slug); created lazily the first time something
    is attached to it ("find or create") and rarely deleted.

    Example:
    --------
    page="storefront", slug="storefront-favorites"
    page="recipes", slug="recipes-weekly-pick" (singleton slot)
    """

    __tablename__ = "carousels"

    page: Mapped[PageType] = mapped_column(
        _enum_column(PageType, "page_type"),
        nullable=False,
        index=True,
        comment="Site section this carousel belongs to"
    )

    slug: Mapped[str] = mapped_column(
        String100,
        nullable=False,
        comment="Carousel name, unique within its page"
    )

    title: Mapped[str | None] = mapped_column(
        String255,
        nullable=True,
        comment="Optional section heading"
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Optional section subtitle/description"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Inactive carousels are hidden from page renderers"
    )

    # Never touched in request code: deletes go through explicit statements
    items: Mapped[list["CarouselItem"]] = relationship(
        "CarouselItem",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )

    __table_args__ = (
        UniqueConstraint("page", "slug", name="uq_carousel_page_slug"),
    )

    def __repr__(self) -> str:
        return f"Carousel(id={self.id}, page={self.page}, slug='{self.slug}')"


# ================================
# CarouselItem Model
# ================================

class CarouselItem(BaseModel):
    """
    One member of a carousel's ordered list.

    Table: carousel_items
    ---------------------
    Exactly one of youtube_id / album_id / ref_id / link_url is set, and
    which one is fixed by `kind` (see REFERENCE_FIELD_BY_KIND). The
    ck_carousel_items_single_reference check enforces this in the store
    as well, so a bad UPDATE is rejected rather than stored.

    Ordering:
    ---------
    order_index ascending, ties broken by created_at then id. Density is
    maintained by the gap-closer, not by a unique constraint.

    Display fields:
    ---------------
    caption / image_path / badge are copies of the backing entity's data
    so pages render without a join. Editing the entity does not update
    them.
    """

    __tablename__ = "carousel_items"

    carousel_id: Mapped[int] = mapped_column(
        ForeignKey("carousels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning carousel"
    )

    kind: Mapped[ItemKind] = mapped_column(
        _enum_column(ItemKind, "carousel_item_kind"),
        nullable=False,
        comment="What this item points at"
    )

    # ================================
    # Reference columns (exactly one set)
    # ================================

    youtube_id: Mapped[str | None] = mapped_column(
        String100,
        nullable=True,
        comment="External video id (kind=video)"
    )

    album_id: Mapped[str | None] = mapped_column(
        String100,
        nullable=True,
        comment="Album identifier (kind=album)"
    )

    ref_id: Mapped[str | None] = mapped_column(
        String100,
        nullable=True,
        index=True,
        comment="Recipe/product/playlist id (kind=recipe|product|playlist)"
    )

    link_url: Mapped[str | None] = mapped_column(
        String500,
        nullable=True,
        comment="Direct link (kind=tiktok|external)"
    )

    # ================================
    # Ordering & visibility
    # ================================

    order_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Position within the carousel (0-based, ascending)"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Soft-hide without deleting"
    )

    is_featured: Mapped[bool | None] = mapped_column(
        Boolean,
        nullable=True,
        default=None,
        comment="Featured sub-flag for kinds that use one"
    )

    # ================================
    # Denormalized display fields
    # ================================

    caption: Mapped[str | None] = mapped_column(String255, nullable=True)
    image_path: Mapped[str | None] = mapped_column(String500, nullable=True)
    badge: Mapped[str | None] = mapped_column(String50, nullable=True)

    __table_args__ = (
        CheckConstraint(_single_reference_check(), name="single_reference"),
        Index("ix_carousel_items_carousel_order", "carousel_id", "order_index"),
    )

    @property
    def reference(self) -> str | None:
        """Value of the reference column this item's kind uses."""
        return getattr(self, REFERENCE_FIELD_BY_KIND[self.kind])

    def __repr__(self) -> str:
        return (
            f"CarouselItem(id={self.id}, carousel_id={self.carousel_id}, "
            f"kind={self.kind}, reference='{self.reference}', order={self.order_index})"
        )
