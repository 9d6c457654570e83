"""
Singleton Slot Policy.

Some carousels are slots that hold at most one item at a time: the
recipe of the week, the featured vlog, the healing featured video.
Which carousels those are is decided by the cardinality map in
slot_cardinality.py, not inferred from slug text at call sites.

Swapping the item in a slot deletes whatever is there and inserts the
replacement in a single transaction, so an observer sees the old item or
the new one, never both and never neither.
"""

from typing import Optional, Union

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.core.logging import get_logger
from lifestyle_cms.db.deps import DBSession
from lifestyle_cms.models.carousel import Carousel, CarouselItem, ItemKind, PageType
from lifestyle_cms.services.carousel_items import CarouselItemLedger
from lifestyle_cms.services.carousel_store import CarouselStore
from lifestyle_cms.services.errors import SlotCardinalityError, store_operation
from lifestyle_cms.services.item_kinds import resolve_reference
from lifestyle_cms.services.reorder import shift_down_after
from lifestyle_cms.services.slot_cardinality import is_singleton

logger = get_logger(__name__)


class SingletonSlotPolicy:
    """
    Service for single-item carousels.

    Example:
        >>> policy = SingletonSlotPolicy(db)
        >>> await policy.set_slot("recipes", "recipes-weekly-pick", "recipe", "R2")
        >>> (await policy.get_slot("recipes", "recipes-weekly-pick")).ref_id
        'R2'
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.carousels = CarouselStore(db)
        self.ledger = CarouselItemLedger(db)

    async def _singleton_carousel(self, carousel_id: int) -> Carousel:
        carousel = await self.carousels.get(carousel_id)
        if not is_singleton(carousel.page, carousel.slug):
            raise SlotCardinalityError(
                f"Carousel {carousel.page}/{carousel.slug} is not a singleton slot",
                carousel_id=carousel_id,
            )
        return carousel

    async def _slot(self, page: Union[PageType, str], slug: str) -> Carousel:
        if not is_singleton(page, slug):
            raise SlotCardinalityError(
                f"Carousel {page}/{slug} is not a singleton slot",
                page=str(page),
                slug=slug,
            )
        return await self.carousels.find_or_create(page, slug)

    # ========================================
    # By carousel id
    # ========================================

    async def set_singleton(
        self,
        carousel_id: int,
        kind: Union[ItemKind, str, None],
        reference: Optional[str] = None,
        caption: Optional[str] = None,
        image_path: Optional[str] = None,
        **reference_fields: Optional[str],
    ) -> CarouselItem:
        """
        Make (kind, reference) the only item of a singleton carousel.

        Every existing item is removed regardless of its kind, then the new
        one is inserted at position 0, all in one transaction. If the insert
        fails the removal is rolled back too.

        Raises:
            SlotCardinalityError: The carousel is not a singleton slot
            UnknownKindError / MissingReferenceError: invalid kind or reference
        """
        ref = resolve_reference(kind, reference, **reference_fields)
        await self._singleton_carousel(carousel_id)

        item = self.ledger._build_item(
            carousel_id,
            ref,
            order_index=0,
            is_active=True,
            caption=caption,
            image_path=image_path,
        )
        async with store_operation(self.db, "set_singleton", carousel_id=carousel_id):
            removed = await self.db.execute(
                delete(CarouselItem).where(CarouselItem.carousel_id == carousel_id)
            )
            self.db.add(item)

        logger.info(
            "singleton_set",
            carousel_id=carousel_id,
            kind=ref.kind.value,
            reference=ref.value,
            replaced=removed.rowcount or 0,
        )
        return item

    async def clear_singleton(self, carousel_id: int) -> int:
        """Empty a singleton carousel; returns how many items were removed (0 if already empty)."""
        await self._singleton_carousel(carousel_id)
        async with store_operation(self.db, "clear_singleton", carousel_id=carousel_id):
            result = await self.db.execute(
                delete(CarouselItem).where(CarouselItem.carousel_id == carousel_id)
            )

        removed = result.rowcount or 0
        logger.info("singleton_cleared", carousel_id=carousel_id, removed=removed)
        return removed

    async def get_singleton(self, carousel_id: int) -> Optional[CarouselItem]:
        """The slot's active item, or None when the slot is empty."""
        items = await self.ledger.list_items(carousel_id)
        return items[0] if items else None

    # ========================================
    # By (page, slug)
    # ========================================

    async def set_slot(
        self,
        page: Union[PageType, str],
        slug: str,
        kind: Union[ItemKind, str, None],
        reference: Optional[str] = None,
        caption: Optional[str] = None,
        image_path: Optional[str] = None,
        **reference_fields: Optional[str],
    ) -> CarouselItem:
        """set_singleton() on the (page, slug) slot, creating the carousel on first use."""
        resolve_reference(kind, reference, **reference_fields)
        carousel = await self._slot(page, slug)
        return await self.set_singleton(
            carousel.id,
            kind,
            reference,
            caption=caption,
            image_path=image_path,
            **reference_fields,
        )

    async def clear_slot(self, page: Union[PageType, str], slug: str) -> int:
        if not is_singleton(page, slug):
            raise SlotCardinalityError(
                f"Carousel {page}/{slug} is not a singleton slot",
                page=str(page),
                slug=slug,
            )
        carousel = await self.carousels.find_by_page_slug(page, slug)
        if carousel is None:
            return 0
        return await self.clear_singleton(carousel.id)

    async def get_slot(self, page: Union[PageType, str], slug: str) -> Optional[CarouselItem]:
        """The slot's item; a slot that was never created reads as empty."""
        carousel = await self.carousels.find_by_page_slug(page, slug)
        if carousel is None:
            return None
        return await self.get_singleton(carousel.id)

    async def promote(
        self,
        item_id: int,
        page: Union[PageType, str],
        slug: str
    ) -> CarouselItem:
        """
        Move an existing item into a singleton slot.

        The slot's current occupant is deleted, the item leaves its source
        carousel (which is compacted) and becomes the slot's only item.
        """
        item = await self.ledger.get_item(item_id)
        carousel = await self._slot(page, slug)
        if item.carousel_id == carousel.id:
            return item

        source_id, source_index = item.carousel_id, item.order_index
        async with store_operation(self.db, "promote_to_singleton", item_id=item_id, carousel_id=carousel.id):
            await self.db.execute(
                delete(CarouselItem).where(CarouselItem.carousel_id == carousel.id)
            )
            item.carousel_id = carousel.id
            item.order_index = 0
            item.is_active = True
            await self.db.flush()
            await shift_down_after(self.db, source_id, source_index)

        logger.info(
            "singleton_promoted",
            item_id=item_id,
            source_carousel_id=source_id,
            carousel_id=carousel.id,
        )
        return item


def get_singleton_slot_policy(db: DBSession) -> SingletonSlotPolicy:
    """Dependency for injecting SingletonSlotPolicy."""
    return SingletonSlotPolicy(db)
