"""
Tests for CarouselOrdering: gap closing, compaction and explicit reorder.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.models.carousel import Carousel
from lifestyle_cms.services.carousel_items import CarouselItemLedger
from lifestyle_cms.services.errors import CarouselItemNotFoundError
from lifestyle_cms.services.reorder import CarouselOrdering
from lifestyle_cms.services.slot_policy import SingletonSlotPolicy


async def _positions(ledger: CarouselItemLedger, carousel_id: int):
    items = await ledger.list_items(carousel_id, include_inactive=True)
    return [(item.ref_id, item.order_index) for item in items]


@pytest.mark.asyncio
async def test_close_gaps_after_removal(db_session: AsyncSession, favorites: Carousel):
    ledger = CarouselItemLedger(db_session)
    for ref in ("R0", "R1", "R2", "R3"):
        await ledger.create_item(favorites.id, "recipe", ref)
    await ledger.delete_item((await ledger.find_by_reference(favorites.id, "R1")).id, close_gaps=False)

    moved = await CarouselOrdering(db_session).close_gaps_after_removal(favorites.id, 1)

    assert moved == 2
    assert await _positions(ledger, favorites.id) == [("R0", 0), ("R2", 1), ("R3", 2)]


@pytest.mark.asyncio
async def test_close_gaps_on_last_position_moves_nothing(db_session: AsyncSession, favorites: Carousel):
    ledger = CarouselItemLedger(db_session)
    await ledger.create_item(favorites.id, "recipe", "R0")

    assert await CarouselOrdering(db_session).close_gaps_after_removal(favorites.id, 0) == 0


@pytest.mark.asyncio
async def test_compact_repairs_gaps_and_duplicates(db_session: AsyncSession, favorites: Carousel):
    ledger = CarouselItemLedger(db_session)
    await ledger.create_item(favorites.id, "recipe", "A", order_index=3)
    await ledger.create_item(favorites.id, "recipe", "B", order_index=3)
    await ledger.create_item(favorites.id, "recipe", "C", order_index=9)
    await ledger.create_item(favorites.id, "recipe", "D", order_index=1, is_active=False)

    await CarouselOrdering(db_session).compact(favorites.id)

    assert await _positions(ledger, favorites.id) == [("D", 0), ("A", 1), ("B", 2), ("C", 3)]


@pytest.mark.asyncio
async def test_reorder_listed_first_then_rest(db_session: AsyncSession, favorites: Carousel):
    ledger = CarouselItemLedger(db_session)
    a, b, c, d = [await ledger.create_item(favorites.id, "recipe", ref) for ref in "ABCD"]

    ordered = await CarouselOrdering(db_session).reorder(favorites.id, [c.id, a.id])

    assert [item.ref_id for item in ordered] == ["C", "A", "B", "D"]
    assert await _positions(ledger, favorites.id) == [("C", 0), ("A", 1), ("B", 2), ("D", 3)]


@pytest.mark.asyncio
async def test_reorder_ignores_repeated_ids(db_session: AsyncSession, favorites: Carousel):
    ledger = CarouselItemLedger(db_session)
    a, b = [await ledger.create_item(favorites.id, "recipe", ref) for ref in "AB"]

    ordered = await CarouselOrdering(db_session).reorder(favorites.id, [b.id, b.id])
    assert [item.ref_id for item in ordered] == ["B", "A"]


@pytest.mark.asyncio
async def test_reorder_rejects_foreign_items(db_session: AsyncSession, favorites: Carousel, weekly_pick: Carousel):
    ledger = CarouselItemLedger(db_session)
    mine = await ledger.create_item(favorites.id, "recipe", "R1")
    other = await SingletonSlotPolicy(db_session).set_singleton(weekly_pick.id, "recipe", "R2")

    with pytest.raises(CarouselItemNotFoundError) as exc_info:
        await CarouselOrdering(db_session).reorder(favorites.id, [other.id, mine.id])
    assert exc_info.value.details["item_ids"] == [other.id]
