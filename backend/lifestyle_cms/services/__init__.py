"""Carousel content model services."""

from lifestyle_cms.services.carousel_store import CarouselStore, get_carousel_store
from lifestyle_cms.services.carousel_items import CarouselItemLedger, get_carousel_item_ledger
from lifestyle_cms.services.reorder import CarouselOrdering, get_carousel_ordering
from lifestyle_cms.services.slot_policy import SingletonSlotPolicy, get_singleton_slot_policy
from lifestyle_cms.services.membership import MembershipToggleService, get_membership_service
from lifestyle_cms.services.references import ReferenceCleanup, get_reference_cleanup

__all__ = [
    "CarouselStore",
    "get_carousel_store",
    "CarouselItemLedger",
    "get_carousel_item_ledger",
    "CarouselOrdering",
    "get_carousel_ordering",
    "SingletonSlotPolicy",
    "get_singleton_slot_policy",
    "MembershipToggleService",
    "get_membership_service",
    "ReferenceCleanup",
    "get_reference_cleanup",
]
