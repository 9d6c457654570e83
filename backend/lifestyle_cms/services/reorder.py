"""
Reorder / Gap-Closer.

Keeps order_index values of an ordered carousel dense (0..n-1) after
removals, and rewrites positions when an admin reorders a carousel.

shift_down_after() only issues the statement; callers run it inside
their own unit of work so the removal and the compaction commit together.
"""

from typing import List, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.core.logging import get_logger
from lifestyle_cms.db.deps import DBSession
from lifestyle_cms.models.carousel import CarouselItem
from lifestyle_cms.services.errors import (
    CarouselItemNotFoundError,
    store_operation,
    store_read,
)

logger = get_logger(__name__)


def display_order():
    """ORDER BY for carousel items: position, then insertion time, then id."""
    return (
        CarouselItem.order_index.asc(),
        CarouselItem.created_at.asc(),
        CarouselItem.id.asc(),
    )


async def shift_down_after(db: AsyncSession, carousel_id: int, removed_order_index: int) -> int:
    """
    Decrement order_index of every item positioned after the removed one.

    Returns:
        Number of items moved
    """
    result = await db.execute(
        update(CarouselItem)
        .where(
            CarouselItem.carousel_id == carousel_id,
            CarouselItem.order_index > removed_order_index
        )
        .values(order_index=CarouselItem.order_index - 1)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


class CarouselOrdering:
    """Service for compacting and reordering a carousel's items."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _items(self, carousel_id: int) -> List[CarouselItem]:
        async with store_read("list_items_for_ordering", carousel_id=carousel_id):
            result = await self.db.execute(
                select(CarouselItem)
                .where(CarouselItem.carousel_id == carousel_id)
                .order_by(*display_order())
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())

    async def close_gaps_after_removal(self, carousel_id: int, removed_order_index: int) -> int:
        """Close the hole left at removed_order_index; returns how many items moved."""
        async with store_operation(
            self.db,
            "close_gaps",
            carousel_id=carousel_id,
            removed_order_index=removed_order_index,
        ):
            moved = await shift_down_after(self.db, carousel_id, removed_order_index)

        logger.info(
            "carousel_gaps_closed",
            carousel_id=carousel_id,
            removed_order_index=removed_order_index,
            moved=moved,
        )
        return moved

    async def compact(self, carousel_id: int) -> List[CarouselItem]:
        """
        Renumber every item 0..n-1 in current display order.

        Repairs gaps and the duplicate positions that concurrent edits can
        leave behind; ties keep insertion order.
        """
        items = await self._items(carousel_id)
        async with store_operation(self.db, "compact_carousel", carousel_id=carousel_id):
            for position, item in enumerate(items):
                if item.order_index != position:
                    item.order_index = position
        return items

    async def reorder(self, carousel_id: int, item_ids: Sequence[int]) -> List[CarouselItem]:
        """
        Put the listed items first, in the given order, then the rest.

        Raises:
            CarouselItemNotFoundError: An id is not an item of this carousel
        """
        items = await self._items(carousel_id)
        by_id = {item.id: item for item in items}

        missing = [item_id for item_id in item_ids if item_id not in by_id]
        if missing:
            raise CarouselItemNotFoundError(
                f"Items not in carousel {carousel_id}: {missing}",
                carousel_id=carousel_id,
                item_ids=missing,
            )

        listed = set(item_ids)
        ordered = [by_id[item_id] for item_id in dict.fromkeys(item_ids)]
        ordered += [item for item in items if item.id not in listed]

        async with store_operation(self.db, "reorder_carousel", carousel_id=carousel_id):
            for position, item in enumerate(ordered):
                item.order_index = position

        logger.info("carousel_reordered", carousel_id=carousel_id, count=len(ordered))
        return ordered


def get_carousel_ordering(db: DBSession) -> CarouselOrdering:
    """Dependency for injecting CarouselOrdering."""
    return CarouselOrdering(db)
