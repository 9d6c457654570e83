"""
Carousel Store.

Owns the carousels themselves: named content slots identified by
(page, slug). Items inside a carousel are handled by the ledger in
carousel_items.py.
"""

from typing import Any, Dict, List, Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.core.config import settings
from lifestyle_cms.core.logging import get_logger
from lifestyle_cms.db.deps import DBSession
from lifestyle_cms.models.carousel import Carousel, CarouselItem, PageType
from lifestyle_cms.services.errors import (
    CarouselNotFoundError,
    ConstraintViolationError,
    UnknownPageError,
    store_operation,
    store_read,
)

logger = get_logger(__name__)

# Carousel columns a caller may edit after creation
EDITABLE_FIELDS = ("title", "description", "is_active")


def parse_page(page: Union[PageType, str]) -> PageType:
    """Coerce a caller-supplied page into a PageType, raising UnknownPageError."""
    if isinstance(page, PageType):
        return page
    try:
        return PageType(page)
    except ValueError:
        raise UnknownPageError(page)


class CarouselStore:
    """
    Service for carousel lookup and lifecycle.

    Example:
        >>> store = CarouselStore(db)
        >>> carousel = await store.find_or_create("storefront", "storefront-favorites")
        >>> await store.update(carousel.id, {"title": "Our Favorites"})
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========================================
    # Lookups
    # ========================================

    async def find_by_page_slug(
        self,
        page: Union[PageType, str],
        slug: str
    ) -> Optional[Carousel]:
        """
        Find a carousel by its (page, slug) key.

        A miss is an ordinary outcome and returns None; callers use it to
        decide whether to create.
        """
        page = parse_page(page)
        async with store_read("find_carousel", page=page.value, slug=slug):
            result = await self.db.execute(
                select(Carousel).where(
                    Carousel.page == page,
                    Carousel.slug == slug
                )
            )
            return result.scalar_one_or_none()

    async def get(self, carousel_id: int) -> Carousel:
        """
        Get a carousel by id.

        Raises:
            CarouselNotFoundError: No carousel has this id
        """
        async with store_read("get_carousel", carousel_id=carousel_id):
            carousel = await self.db.get(Carousel, carousel_id)
        if carousel is None:
            raise CarouselNotFoundError(
                f"Carousel not found: {carousel_id}",
                carousel_id=carousel_id
            )
        return carousel

    async def list_by_page(
        self,
        page: Union[PageType, str],
        slug: Optional[str] = None
    ) -> List[Carousel]:
        """List a page's carousels, most recently updated first."""
        page = parse_page(page)
        query = (
            select(Carousel)
            .where(Carousel.page == page)
            .order_by(Carousel.updated_at.desc(), Carousel.id.desc())
        )
        if slug:
            query = query.where(Carousel.slug == slug)

        async with store_read("list_carousels", page=page.value, slug=slug):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    # ========================================
    # Mutations
    # ========================================

    async def create(
        self,
        page: Union[PageType, str],
        slug: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        is_active: bool = True
    ) -> Carousel:
        """
        Create a carousel.

        Raises:
            ConstraintViolationError: (page, slug) already exists
        """
        page = parse_page(page)
        carousel = Carousel(
            page=page,
            slug=slug,
            title=title,
            description=description,
            is_active=is_active,
        )

        async with store_operation(self.db, "create_carousel", page=page.value, slug=slug):
            self.db.add(carousel)

        logger.info("carousel_created", carousel_id=carousel.id, page=page.value, slug=slug)
        return carousel

    async def find_or_create(
        self,
        page: Union[PageType, str],
        slug: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        is_active: bool = True
    ) -> Carousel:
        """
        Return the (page, slug) carousel, creating it with the given defaults if absent.

        Safe to call repeatedly. If another caller inserts the same key
        between our lookup and our insert, the unique constraint rejects
        our row and the lookup is retried (FIND_OR_CREATE_RETRIES times)
        instead of failing the request.
        """
        page = parse_page(page)
        carousel = await self.find_by_page_slug(page, slug)
        if carousel is not None:
            return carousel

        try:
            return await self.create(
                page,
                slug,
                title=title,
                description=description,
                is_active=is_active,
            )
        except ConstraintViolationError:
            for attempt in range(settings.FIND_OR_CREATE_RETRIES):
                carousel = await self.find_by_page_slug(page, slug)
                if carousel is not None:
                    logger.info(
                        "carousel_create_race_resolved",
                        carousel_id=carousel.id,
                        page=page.value,
                        slug=slug,
                        attempt=attempt + 1,
                    )
                    return carousel
            raise

    async def update(self, carousel_id: int, changes: Dict[str, Any]) -> Carousel:
        """
        Apply a partial update (title, description, is_active).

        Only keys present in `changes` are written; anything else is
        rejected so slugs and pages stay stable once callers depend on them.
        """
        invalid = set(changes) - set(EDITABLE_FIELDS)
        if invalid:
            raise ConstraintViolationError(
                f"Carousel field(s) not editable: {', '.join(sorted(invalid))}",
                carousel_id=carousel_id,
            )

        carousel = await self.get(carousel_id)
        async with store_operation(self.db, "update_carousel", carousel_id=carousel_id):
            for field, value in changes.items():
                setattr(carousel, field, value)

        logger.info("carousel_updated", carousel_id=carousel_id, fields=sorted(changes))
        return carousel

    async def upsert_header(
        self,
        page: Union[PageType, str],
        slug: str,
        title: Optional[str],
        description: Optional[str],
        is_active: Optional[bool] = None
    ) -> Carousel:
        """Set a section's heading text, creating the carousel on first use."""
        carousel = await self.find_or_create(
            page,
            slug,
            title=title,
            description=description,
            is_active=True if is_active is None else is_active,
        )
        changes: Dict[str, Any] = {"title": title, "description": description}
        if is_active is not None:
            changes["is_active"] = is_active
        return await self.update(carousel.id, changes)

    async def delete(self, carousel_id: int) -> None:
        """
        Delete a carousel and every item it owns.

        Backing entities (recipes, products, albums) are untouched.
        """
        await self.get(carousel_id)
        async with store_operation(self.db, "delete_carousel", carousel_id=carousel_id):
            await self.db.execute(
                delete(CarouselItem).where(CarouselItem.carousel_id == carousel_id)
            )
            await self.db.execute(
                delete(Carousel).where(Carousel.id == carousel_id)
            )

        logger.info("carousel_deleted", carousel_id=carousel_id)


# ========================================
# Dependency Injection
# ========================================

def get_carousel_store(db: DBSession) -> CarouselStore:
    """Dependency for injecting CarouselStore."""
    return CarouselStore(db)
