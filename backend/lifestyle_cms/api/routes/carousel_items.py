"""
Carousel item API endpoints.

Admin CRUD for individual items plus the page-renderer view, which only
ever shows active items of active carousels.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from lifestyle_cms.models.carousel import Carousel, CarouselItem, PageType
from lifestyle_cms.schemas.carousel import (
    CarouselItemCreate,
    CarouselItemResponse,
    CarouselItemUpdate,
    DataResponse,
    MoveRequest,
    PageItemResponse,
    reference_fields_of,
)
from lifestyle_cms.services.carousel_items import CarouselItemLedger, get_carousel_item_ledger

router = APIRouter(prefix="/carousel-items", tags=["Carousel Items"])

Ledger = Annotated[CarouselItemLedger, Depends(get_carousel_item_ledger)]


def _page_item(item: CarouselItem, carousel: Carousel) -> PageItemResponse:
    """Flatten an (item, carousel) row for page rendering."""
    return PageItemResponse(
        **CarouselItemResponse.model_validate(item).model_dump(),
        page=carousel.page,
        slug=carousel.slug,
        carousel_title=carousel.title,
    )


@router.get(
    "",
    response_model=DataResponse[List[PageItemResponse]],
    summary="Items a page renders",
    description=(
        "Active items of the page's active carousels, by position. "
        "A carousel that does not exist yields an empty list."
    ),
)
async def list_page_items(
    ledger: Ledger,
    page: PageType = Query(...),
    slug: Optional[str] = Query(None),
):
    rows = await ledger.list_page_items(page, slug)
    return {"data": [_page_item(item, carousel) for item, carousel in rows]}


@router.post(
    "",
    response_model=DataResponse[CarouselItemResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Attach content to a carousel",
    responses={
        404: {"description": "Carousel not found"},
        422: {"description": "Unknown kind or missing reference"},
    },
)
async def create_item(ledger: Ledger, request: CarouselItemCreate = Body(...)):
    """The body's `kind` decides which reference column it may carry."""
    item = await ledger.create_item(
        request.carousel_id,
        request.kind,
        request.reference,
        order_index=request.order_index,
        caption=request.caption,
        is_active=request.is_active,
        is_featured=request.is_featured,
        image_path=request.image_path,
        badge=request.badge,
        **reference_fields_of(request),
    )
    return {"data": item}


@router.get("/{item_id}", response_model=DataResponse[CarouselItemResponse])
async def get_item(item_id: int, ledger: Ledger):
    return {"data": await ledger.get_item(item_id)}


@router.put("/{item_id}", response_model=DataResponse[CarouselItemResponse])
async def update_item(item_id: int, request: CarouselItemUpdate, ledger: Ledger):
    item = await ledger.update_item(item_id, request.model_dump(exclude_unset=True))
    return {"data": item}


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: int, ledger: Ledger):
    """Detach the item; later items move up one position."""
    await ledger.delete_item(item_id)


@router.post(
    "/{item_id}/move",
    response_model=DataResponse[CarouselItemResponse],
    summary="Move an item into another carousel",
)
async def move_item(item_id: int, request: MoveRequest, ledger: Ledger):
    item = await ledger.move_item(
        item_id,
        request.page,
        request.slug,
        order_index=request.order_index,
    )
    return {"data": item}
