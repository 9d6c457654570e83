"""
Carousel API endpoints.

Carousels are looked up by id or by their (page, slug) key. Handlers are
thin: validation of kinds and references, transactions and error
translation all happen in the services.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status

from lifestyle_cms.models.carousel import PageType
from lifestyle_cms.schemas.carousel import (
    CarouselCreate,
    CarouselItemResponse,
    CarouselResponse,
    CarouselUpdate,
    DataResponse,
    HeaderUpsert,
    ReorderRequest,
)
from lifestyle_cms.services.carousel_items import CarouselItemLedger, get_carousel_item_ledger
from lifestyle_cms.services.carousel_store import CarouselStore, get_carousel_store
from lifestyle_cms.services.reorder import CarouselOrdering, get_carousel_ordering

router = APIRouter(prefix="/carousels", tags=["Carousels"])

Store = Annotated[CarouselStore, Depends(get_carousel_store)]
Ledger = Annotated[CarouselItemLedger, Depends(get_carousel_item_ledger)]
Ordering = Annotated[CarouselOrdering, Depends(get_carousel_ordering)]


# ========================================
# Lookup by (page, slug)
# ========================================

@router.get(
    "",
    response_model=DataResponse[List[CarouselResponse]],
    summary="List a page's carousels",
)
async def list_carousels(
    store: Store,
    page: PageType = Query(..., description="Site section"),
    slug: Optional[str] = Query(None, description="Restrict to one slug"),
):
    """Carousels of a page, most recently updated first."""
    carousels = await store.list_by_page(page, slug)
    return {"data": carousels}


@router.get(
    "/find",
    response_model=DataResponse[Optional[CarouselResponse]],
    summary="Find a carousel by page and slug",
    description="Returns `data: null` when no carousel has this key.",
)
async def find_carousel(
    store: Store,
    page: PageType = Query(...),
    slug: str = Query(..., min_length=1),
):
    carousel = await store.find_by_page_slug(page, slug)
    return {"data": carousel}


@router.post(
    "/find-or-create",
    response_model=DataResponse[CarouselResponse],
    summary="Resolve a carousel, creating it if absent",
)
async def find_or_create_carousel(request: CarouselCreate, store: Store):
    carousel = await store.find_or_create(
        request.page,
        request.slug,
        title=request.title,
        description=request.description,
        is_active=request.is_active,
    )
    return {"data": carousel}


@router.put(
    "/header",
    response_model=DataResponse[CarouselResponse],
    summary="Set a section's title and description",
)
async def upsert_header(request: HeaderUpsert, store: Store):
    carousel = await store.upsert_header(
        request.page,
        request.slug,
        title=request.title,
        description=request.description,
        is_active=request.is_active,
    )
    return {"data": carousel}


@router.post(
    "",
    response_model=DataResponse[CarouselResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a carousel",
    responses={409: {"description": "(page, slug) already exists"}},
)
async def create_carousel(request: CarouselCreate, store: Store):
    carousel = await store.create(
        request.page,
        request.slug,
        title=request.title,
        description=request.description,
        is_active=request.is_active,
    )
    return {"data": carousel}


# ========================================
# By id
# ========================================

@router.get("/{carousel_id}", response_model=DataResponse[CarouselResponse])
async def get_carousel(carousel_id: int, store: Store):
    return {"data": await store.get(carousel_id)}


@router.put("/{carousel_id}", response_model=DataResponse[CarouselResponse])
async def update_carousel(carousel_id: int, request: CarouselUpdate, store: Store):
    """Write only the fields present in the body."""
    carousel = await store.update(carousel_id, request.model_dump(exclude_unset=True))
    return {"data": carousel}


@router.delete("/{carousel_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_carousel(carousel_id: int, store: Store):
    """Delete a carousel with all its items; backing entities are untouched."""
    await store.delete(carousel_id)


# ========================================
# Items of a carousel
# ========================================

@router.get(
    "/{carousel_id}/items",
    response_model=DataResponse[List[CarouselItemResponse]],
    summary="List a carousel's items by position",
)
async def list_carousel_items(
    carousel_id: int,
    ledger: Ledger,
    include_inactive: bool = Query(False, description="Include hidden items (admin views)"),
):
    await ledger.carousels.get(carousel_id)
    items = await ledger.list_items(carousel_id, include_inactive=include_inactive)
    return {"data": items}


@router.delete(
    "/{carousel_id}/items/by-reference/{reference}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove the item pointing at a reference",
    description="Succeeds whether or not a matching item existed.",
)
async def remove_item_by_reference(carousel_id: int, reference: str, ledger: Ledger):
    await ledger.remove_by_reference(carousel_id, reference)


@router.put(
    "/{carousel_id}/items/order",
    response_model=DataResponse[List[CarouselItemResponse]],
    summary="Reorder a carousel's items",
)
async def reorder_items(
    carousel_id: int,
    request: ReorderRequest,
    store: Store,
    ordering: Ordering,
):
    await store.get(carousel_id)
    items = await ordering.reorder(carousel_id, request.item_ids)
    return {"data": items}


@router.post(
    "/{carousel_id}/items/compact",
    response_model=DataResponse[List[CarouselItemResponse]],
    summary="Renumber items 0..n-1 in display order",
)
async def compact_items(carousel_id: int, store: Store, ordering: Ordering):
    await store.get(carousel_id)
    items = await ordering.compact(carousel_id)
    return {"data": items}
