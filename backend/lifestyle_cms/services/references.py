"""
Detaching deleted domain entities from carousels.

Carousel items reference recipes, products and albums by identifier only,
so the store cannot cascade when one of those is deleted. The owning
service calls detach_reference() instead.
"""

from collections import defaultdict
from typing import Dict, List, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.core.logging import get_logger
from lifestyle_cms.db.deps import DBSession
from lifestyle_cms.models.carousel import CarouselItem, ItemKind
from lifestyle_cms.services.errors import store_operation, store_read
from lifestyle_cms.services.item_kinds import resolve_reference
from lifestyle_cms.services.reorder import shift_down_after

logger = get_logger(__name__)


class ReferenceCleanup:
    """Removes every carousel item pointing at a given entity."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def detach_reference(self, kind: Union[ItemKind, str], reference: str) -> Dict[int, int]:
        """
        Delete all items of `kind` referencing `reference`, in every carousel.

        Each affected carousel is compacted in the same transaction.

        Returns:
            Mapping of carousel id to the number of items removed from it
            (empty when nothing referenced the entity)
        """
        ref = resolve_reference(kind, reference)

        async with store_read("find_references", kind=ref.kind.value, reference=ref.value):
            result = await self.db.execute(
                select(CarouselItem.id, CarouselItem.carousel_id, CarouselItem.order_index)
                .where(
                    CarouselItem.kind == ref.kind,
                    getattr(CarouselItem, ref.field) == ref.value,
                )
            )
            rows = result.all()

        if not rows:
            return {}

        by_carousel: Dict[int, List[tuple]] = defaultdict(list)
        for item_id, carousel_id, order_index in rows:
            by_carousel[carousel_id].append((order_index, item_id))

        async with store_operation(self.db, "detach_reference", kind=ref.kind.value, reference=ref.value):
            for carousel_id, positions in by_carousel.items():
                # Highest position first so each shift leaves earlier positions intact
                for order_index, item_id in sorted(positions, reverse=True):
                    await self.db.execute(delete(CarouselItem).where(CarouselItem.id == item_id))
                    await shift_down_after(self.db, carousel_id, order_index)

        removed = {carousel_id: len(positions) for carousel_id, positions in by_carousel.items()}
        logger.info(
            "reference_detached",
            kind=ref.kind.value,
            reference=ref.value,
            carousels=len(removed),
            items=sum(removed.values()),
        )
        return removed


def get_reference_cleanup(db: DBSession) -> ReferenceCleanup:
    """Dependency for injecting ReferenceCleanup."""
    return ReferenceCleanup(db)
