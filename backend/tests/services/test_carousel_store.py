"""
Tests for CarouselStore: (page, slug) lookup, find-or-create and lifecycle.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.core.config import settings
from lifestyle_cms.models.carousel import Carousel, CarouselItem, PageType
from lifestyle_cms.services.carousel_items import CarouselItemLedger
from lifestyle_cms.services.carousel_store import CarouselStore
from lifestyle_cms.services.errors import (
    CarouselNotFoundError,
    ConstraintViolationError,
    UnknownPageError,
)


async def _count(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_find_missing_returns_none(db_session: AsyncSession):
    store = CarouselStore(db_session)
    assert await store.find_by_page_slug("storefront", "storefront-favorites") is None


@pytest.mark.asyncio
async def test_unknown_page(db_session: AsyncSession):
    store = CarouselStore(db_session)
    with pytest.raises(UnknownPageError):
        await store.find_by_page_slug("blog", "anything")


@pytest.mark.asyncio
async def test_create_and_find(db_session: AsyncSession):
    store = CarouselStore(db_session)
    created = await store.create("storefront", "storefront-top-picks", title="Top Picks")

    found = await store.find_by_page_slug(PageType.STOREFRONT, "storefront-top-picks")
    assert found is not None
    assert found.id == created.id
    assert found.title == "Top Picks"
    assert found.is_active is True


@pytest.mark.asyncio
async def test_same_slug_on_different_pages(db_session: AsyncSession):
    store = CarouselStore(db_session)
    home = await store.create("home", "featured")
    vlogs = await store.create("vlogs", "featured")
    assert home.id != vlogs.id


@pytest.mark.asyncio
async def test_duplicate_create_is_constraint_violation(db_session: AsyncSession):
    store = CarouselStore(db_session)
    await store.create("recipes", "recipes-beginner")

    with pytest.raises(ConstraintViolationError) as exc_info:
        await store.create("recipes", "recipes-beginner")
    assert exc_info.value.status_code == 409
    assert await _count(db_session, Carousel) == 1


@pytest.mark.asyncio
async def test_find_or_create_is_idempotent(db_session: AsyncSession):
    store = CarouselStore(db_session)
    first = await store.find_or_create("recipes", "recipes-favorites", title="Favorites")
    second = await store.find_or_create("recipes", "recipes-favorites", title="Ignored")

    assert first.id == second.id
    assert second.title == "Favorites"
    assert await _count(db_session, Carousel) == 1


@pytest.mark.asyncio
async def test_find_or_create_applies_defaults(db_session: AsyncSession):
    store = CarouselStore(db_session)
    carousel = await store.find_or_create(
        "healing", "healing-part-1", title="Part 1", description="Start here", is_active=False
    )
    assert carousel.description == "Start here"
    assert carousel.is_active is False


@pytest.mark.asyncio
async def test_find_or_create_recovers_from_insert_race(db_session: AsyncSession, monkeypatch):
    """Another writer inserts the key between our lookup and our insert."""
    store = CarouselStore(db_session)
    winner = await store.create("storefront", "storefront-favorites")
    winner_id = winner.id

    real_find = store.find_by_page_slug
    calls = {"n": 0}

    async def stale_then_real(page, slug):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return await real_find(page, slug)

    monkeypatch.setattr(store, "find_by_page_slug", stale_then_real)

    carousel = await store.find_or_create("storefront", "storefront-favorites")
    assert carousel.id == winner_id
    assert calls["n"] == 2
    assert await _count(db_session, Carousel) == 1


@pytest.mark.asyncio
async def test_find_or_create_without_retries_reports_violation(db_session: AsyncSession, monkeypatch):
    store = CarouselStore(db_session)
    await store.create("storefront", "storefront-favorites")

    async def always_missing(page, slug):
        return None

    monkeypatch.setattr(store, "find_by_page_slug", always_missing)
    monkeypatch.setattr(settings, "FIND_OR_CREATE_RETRIES", 0)

    with pytest.raises(ConstraintViolationError):
        await store.find_or_create("storefront", "storefront-favorites")


@pytest.mark.asyncio
async def test_get_missing(db_session: AsyncSession):
    store = CarouselStore(db_session)
    with pytest.raises(CarouselNotFoundError) as exc_info:
        await store.get(404)
    assert exc_info.value.details == {"carousel_id": 404}


@pytest.mark.asyncio
async def test_list_by_page(db_session: AsyncSession):
    store = CarouselStore(db_session)
    await store.create("recipes", "recipes-favorites")
    await store.create("recipes", "recipes-beginner")
    await store.create("home", "home-hero")

    recipes = await store.list_by_page("recipes")
    assert {c.slug for c in recipes} == {"recipes-favorites", "recipes-beginner"}

    only = await store.list_by_page("recipes", slug="recipes-beginner")
    assert [c.slug for c in only] == ["recipes-beginner"]


@pytest.mark.asyncio
async def test_update_partial(db_session: AsyncSession):
    store = CarouselStore(db_session)
    carousel = await store.create("vlogs", "vlogs-latest", title="Latest", description="New uploads")

    updated = await store.update(carousel.id, {"title": "Fresh"})
    assert updated.title == "Fresh"
    assert updated.description == "New uploads"


@pytest.mark.asyncio
async def test_update_rejects_key_fields(db_session: AsyncSession):
    store = CarouselStore(db_session)
    carousel = await store.create("vlogs", "vlogs-latest")

    with pytest.raises(ConstraintViolationError):
        await store.update(carousel.id, {"slug": "renamed"})


@pytest.mark.asyncio
async def test_upsert_header_creates_then_updates(db_session: AsyncSession):
    store = CarouselStore(db_session)
    created = await store.upsert_header("healing", "healing-header", "Healing", "Gentle recipes")
    updated = await store.upsert_header("healing", "healing-header", "Healing Kitchen", None)

    assert created.id == updated.id
    assert updated.title == "Healing Kitchen"
    assert updated.description is None
    assert await _count(db_session, Carousel) == 1


@pytest.mark.asyncio
async def test_delete_removes_items(db_session: AsyncSession):
    store = CarouselStore(db_session)
    ledger = CarouselItemLedger(db_session)
    carousel = await store.create("storefront", "storefront-favorites")
    await ledger.create_item(carousel.id, "product", "P1")
    await ledger.create_item(carousel.id, "product", "P2")

    await store.delete(carousel.id)

    assert await store.find_by_page_slug("storefront", "storefront-favorites") is None
    assert await _count(db_session, CarouselItem) == 0


@pytest.mark.asyncio
async def test_delete_missing(db_session: AsyncSession):
    with pytest.raises(CarouselNotFoundError):
        await CarouselStore(db_session).delete(1)
