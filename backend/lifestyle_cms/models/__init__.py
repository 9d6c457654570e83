"""
Database Models

Import models from this module to ensure they're registered with SQLAlchemy:

    from lifestyle_cms.models import Carousel, CarouselItem

This keeps Alembic autogenerate and Base.metadata.create_all aware of
every table.
"""

from lifestyle_cms.models.carousel import (
    REFERENCE_FIELD_BY_KIND,
    REFERENCE_FIELDS,
    Carousel,
    CarouselItem,
    ItemKind,
    PageType,
)

__all__ = [
    # Models
    "Carousel",
    "CarouselItem",
    # Enums
    "PageType",
    "ItemKind",
    # Kind → reference column mapping
    "REFERENCE_FIELDS",
    "REFERENCE_FIELD_BY_KIND",
]
