"""
Database Base Classes and Common Utilities

Foundation for every ORM model in the CMS.

Key Concepts:
--------------
1. Base: SQLAlchemy DeclarativeBase bound to a metadata object with
   predictable constraint names (Alembic relies on them)
2. CommonTableAttributes / BaseModel: id, created_at and updated_at
   columns shared by carousels and carousel items
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, MetaData, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, registry


# ================================
# Naming Convention for Constraints
# ================================
# - uq_carousels_slug: unique constraint on carousels starting at 'slug'
# - fk_carousel_items_carousel_id_carousels: carousel_items.carousel_id -> carousels
# - ck_carousel_items_single_reference: the one-reference check
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

orm_registry = registry(metadata=metadata)


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


# ================================
# Base DeclarativeBase Class
# ================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Usage:
        class Carousel(Base):
            __tablename__ = "carousels"
            id: Mapped[int] = mapped_column(primary_key=True)
    """

    registry = orm_registry
    metadata = metadata

    __tablename__: str


# ================================
# Common Table Attributes Mixin
# ================================
class CommonTableAttributes:
    """
    Mixin that adds the columns every CMS table carries.

    - id: auto-incrementing primary key (opaque to API callers)
    - created_at: set once on insert; breaks order_index ties
    - updated_at: bumped on every UPDATE; carousels list newest-first by it

    Timestamps are always stored in UTC.
    """

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=True,
        comment="Auto-incrementing primary key"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Timestamp when record was created (UTC)"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        comment="Timestamp when record was last updated (UTC)"
    )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"


class BaseModel(Base, CommonTableAttributes):
    """
    Ready-to-use abstract base: Base + id/created_at/updated_at.

        class CarouselItem(BaseModel):
            __tablename__ = "carousel_items"
    """

    __abstract__ = True


# ================================
# String Length Constraints
# ================================
String50 = String(50)  # slugs, kind tags
String100 = String(100)  # external ids, badges
String255 = String(255)  # titles, captions
String500 = String(500)  # URLs, storage paths
