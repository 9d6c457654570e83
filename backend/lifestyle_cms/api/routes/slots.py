"""
Singleton slot and membership API endpoints.

Slots (recipe of the week, featured video) hold at most one item;
memberships (favorites, top picks) toggle a domain id in or out of an
ordered carousel. Both create their carousel on first use.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, status

from lifestyle_cms.models.carousel import CarouselItem, ItemKind, PageType
from lifestyle_cms.schemas.carousel import (
    CarouselItemResponse,
    DataResponse,
    DetachResponse,
    MembershipResponse,
    MembershipSet,
    SingletonSet,
    SlotResponse,
)
from lifestyle_cms.services.membership import MembershipToggleService, get_membership_service
from lifestyle_cms.services.references import ReferenceCleanup, get_reference_cleanup
from lifestyle_cms.services.slot_policy import SingletonSlotPolicy, get_singleton_slot_policy

router = APIRouter(tags=["Slots & Memberships"])

Slots = Annotated[SingletonSlotPolicy, Depends(get_singleton_slot_policy)]
Memberships = Annotated[MembershipToggleService, Depends(get_membership_service)]
References = Annotated[ReferenceCleanup, Depends(get_reference_cleanup)]


def _item_out(item: Optional[CarouselItem]) -> Optional[CarouselItemResponse]:
    return CarouselItemResponse.model_validate(item) if item is not None else None


# ========================================
# Singleton slots
# ========================================

@router.get("/slots/{page}/{slug}", response_model=DataResponse[SlotResponse])
async def get_slot(page: PageType, slug: str, slots: Slots):
    """The slot's item, or `item: null` when empty."""
    item = await slots.get_slot(page, slug)
    return {"data": SlotResponse(page=page, slug=slug, item=_item_out(item))}


@router.put(
    "/slots/{page}/{slug}",
    response_model=DataResponse[SlotResponse],
    summary="Replace a singleton slot's item",
    responses={409: {"description": "Not a singleton slot"}},
)
async def set_slot(page: PageType, slug: str, request: SingletonSet, slots: Slots):
    item = await slots.set_slot(
        page,
        slug,
        request.kind,
        request.reference,
        caption=request.caption,
        image_path=request.image_path,
    )
    return {"data": SlotResponse(page=page, slug=slug, item=_item_out(item))}


@router.delete("/slots/{page}/{slug}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_slot(page: PageType, slug: str, slots: Slots):
    await slots.clear_slot(page, slug)


@router.post(
    "/slots/{page}/{slug}/promote/{item_id}",
    response_model=DataResponse[SlotResponse],
    summary="Move an existing item into a singleton slot",
)
async def promote_to_slot(page: PageType, slug: str, item_id: int, slots: Slots):
    item = await slots.promote(item_id, page, slug)
    return {"data": SlotResponse(page=page, slug=slug, item=_item_out(item))}


# ========================================
# Memberships
# ========================================

@router.get(
    "/memberships/{page}/{slug}",
    response_model=DataResponse[List[CarouselItemResponse]],
    summary="List members of a membership carousel",
)
async def list_members(page: PageType, slug: str, memberships: Memberships):
    return {"data": await memberships.list_members(page, slug)}


@router.get(
    "/memberships/{page}/{slug}/{domain_id}",
    response_model=DataResponse[MembershipResponse],
)
async def get_membership(
    page: PageType,
    slug: str,
    domain_id: str,
    memberships: Memberships,
    kind: Optional[ItemKind] = None,
):
    is_member = await memberships.is_member(page, slug, domain_id, kind=kind)
    return {"data": MembershipResponse(domain_id=domain_id, is_member=is_member)}


@router.put(
    "/memberships/{page}/{slug}/{domain_id}",
    response_model=DataResponse[MembershipResponse],
    summary="Turn a membership on or off",
    description="Idempotent: repeating a call leaves the carousel unchanged.",
)
async def set_membership(
    page: PageType,
    slug: str,
    domain_id: str,
    request: MembershipSet,
    memberships: Memberships,
):
    result = await memberships.set_membership(
        page,
        slug,
        domain_id,
        request.on,
        kind=request.kind,
        order_index=request.order_index,
        caption=request.caption,
        image_path=request.image_path,
    )
    return {
        "data": MembershipResponse(
            domain_id=domain_id,
            is_member=result.is_member,
            changed=result.changed,
            item=_item_out(result.item),
        )
    }


# ========================================
# Deleted domain entities
# ========================================

@router.delete(
    "/references/{kind}/{reference}",
    response_model=DataResponse[DetachResponse],
    summary="Detach a deleted entity from every carousel",
)
async def detach_reference(kind: ItemKind, reference: str, references: References):
    removed = await references.detach_reference(kind, reference)
    return {"data": DetachResponse(kind=kind, reference=reference, removed=removed)}
