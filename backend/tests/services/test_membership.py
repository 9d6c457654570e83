"""
Tests for MembershipToggleService: idempotent favorite-style toggles.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.models.carousel import CarouselItem, ItemKind
from lifestyle_cms.services.carousel_items import CarouselItemLedger
from lifestyle_cms.services.carousel_store import CarouselStore
from lifestyle_cms.services.errors import MissingReferenceError, SlotCardinalityError
from lifestyle_cms.services.membership import MembershipToggleService


async def _rows_referencing(db: AsyncSession, ref_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(CarouselItem).where(CarouselItem.ref_id == ref_id)
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_toggle_on_twice_then_off(db_session: AsyncSession):
    memberships = MembershipToggleService(db_session)

    first = await memberships.set_membership("recipes", "recipes-favorites", "R5", True)
    second = await memberships.set_membership("recipes", "recipes-favorites", "R5", True)

    assert first.changed is True
    assert second.changed is False
    assert second.item.id == first.item.id
    assert await _rows_referencing(db_session, "R5") == 1

    off = await memberships.set_membership("recipes", "recipes-favorites", "R5", False)
    assert off.changed is True
    assert off.is_member is False
    assert await _rows_referencing(db_session, "R5") == 0


@pytest.mark.asyncio
async def test_toggle_off_when_absent_is_noop(db_session: AsyncSession):
    memberships = MembershipToggleService(db_session)

    result = await memberships.set_membership("recipes", "recipes-favorites", "R5", False)
    again = await memberships.set_membership("recipes", "recipes-favorites", "R5", False)

    assert result.changed is False
    assert again.changed is False
    assert await _rows_referencing(db_session, "R5") == 0


@pytest.mark.asyncio
async def test_toggle_creates_carousel_on_first_use(db_session: AsyncSession):
    await MembershipToggleService(db_session).set_membership("storefront", "storefront-top-picks", "P1", True)

    carousel = await CarouselStore(db_session).find_by_page_slug("storefront", "storefront-top-picks")
    assert carousel is not None


@pytest.mark.asyncio
async def test_default_kind_follows_page(db_session: AsyncSession):
    memberships = MembershipToggleService(db_session)

    recipe = await memberships.set_membership("recipes", "recipes-beginner", "R1", True)
    product = await memberships.set_membership("storefront", "storefront-favorites", "P1", True)
    video = await memberships.set_membership("healing", "healing-part-1", "yt-1", True)

    assert recipe.item.kind == ItemKind.RECIPE
    assert product.item.kind == ItemKind.PRODUCT
    assert video.item.kind == ItemKind.VIDEO
    assert video.item.youtube_id == "yt-1"


@pytest.mark.asyncio
async def test_new_members_go_to_the_end(db_session: AsyncSession):
    memberships = MembershipToggleService(db_session)
    for ref in ("P1", "P2", "P3"):
        await memberships.set_membership("storefront", "storefront-favorites", ref, True)

    members = await memberships.list_members("storefront", "storefront-favorites")
    assert [(item.ref_id, item.order_index) for item in members] == [("P1", 0), ("P2", 1), ("P3", 2)]


@pytest.mark.asyncio
async def test_removal_closes_gap(db_session: AsyncSession):
    memberships = MembershipToggleService(db_session)
    for ref in ("P1", "P2", "P3"):
        await memberships.set_membership("storefront", "storefront-favorites", ref, True)

    await memberships.set_membership("storefront", "storefront-favorites", "P1", False)

    members = await memberships.list_members("storefront", "storefront-favorites")
    assert [(item.ref_id, item.order_index) for item in members] == [("P2", 0), ("P3", 1)]


@pytest.mark.asyncio
async def test_on_with_order_index_repositions_existing(db_session: AsyncSession):
    memberships = MembershipToggleService(db_session)
    await memberships.set_membership("recipes", "recipes-favorites", "R1", True)

    result = await memberships.set_membership("recipes", "recipes-favorites", "R1", True, order_index=4)

    assert result.changed is True
    assert result.item.order_index == 4
    assert await _rows_referencing(db_session, "R1") == 1


@pytest.mark.asyncio
async def test_on_reactivates_hidden_member(db_session: AsyncSession):
    memberships = MembershipToggleService(db_session)
    added = await memberships.set_membership("recipes", "recipes-favorites", "R5", True)
    await CarouselItemLedger(db_session).update_item(added.item.id, {"is_active": False})

    result = await memberships.set_membership("recipes", "recipes-favorites", "R5", True)

    assert result.changed is True
    assert result.item.id == added.item.id
    assert result.item.is_active is True
    active = await CarouselItemLedger(db_session).list_items(added.item.carousel_id)
    assert [item.ref_id for item in active] == ["R5"]
    assert await _rows_referencing(db_session, "R5") == 1


@pytest.mark.asyncio
async def test_is_member(db_session: AsyncSession):
    memberships = MembershipToggleService(db_session)
    assert await memberships.is_member("recipes", "recipes-favorites", "R1") is False

    await memberships.set_membership("recipes", "recipes-favorites", "R1", True)
    assert await memberships.is_member("recipes", "recipes-favorites", "R1") is True
    assert await memberships.is_member("recipes", "recipes-favorites", "R2") is False


@pytest.mark.asyncio
async def test_membership_in_singleton_slot_is_rejected(db_session: AsyncSession):
    with pytest.raises(SlotCardinalityError):
        await MembershipToggleService(db_session).set_membership(
            "recipes", "recipes-weekly-pick", "R1", True
        )


@pytest.mark.asyncio
async def test_blank_domain_id_is_rejected(db_session: AsyncSession):
    with pytest.raises(MissingReferenceError):
        await MembershipToggleService(db_session).set_membership("recipes", "recipes-favorites", " ", True)
