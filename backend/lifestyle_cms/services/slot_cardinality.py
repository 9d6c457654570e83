"""
Slot cardinality map.

Decides whether a (page, slug) carousel is an ordered list or a singleton
slot holding at most one item. Built-in slots are listed here; more can be
added through the SINGLETON_SLOTS setting.
"""

import enum
from typing import Dict, Tuple, Union

from lifestyle_cms.core.config import settings
from lifestyle_cms.models.carousel import PageType
from lifestyle_cms.services.carousel_store import parse_page


class SlotCardinality(str, enum.Enum):
    """How many active items a carousel may hold."""

    ORDERED = "ordered"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


# Built-in singleton slots; anything not listed is an ordered carousel
SLOT_CARDINALITY: Dict[Tuple[PageType, str], SlotCardinality] = {
    (PageType.RECIPES, "recipes-weekly-pick"): SlotCardinality.SINGLETON,
    (PageType.HEALING, "healing-featured"): SlotCardinality.SINGLETON,
    (PageType.VLOGS, "vlogs-featured"): SlotCardinality.SINGLETON,
    (PageType.HOME, "home-featured-video"): SlotCardinality.SINGLETON,
}


def cardinality_of(page: Union[PageType, str], slug: str) -> SlotCardinality:
    """Cardinality of the (page, slug) carousel, built-ins first, then settings."""
    page = parse_page(page)
    if (page, slug) in SLOT_CARDINALITY:
        return SLOT_CARDINALITY[(page, slug)]
    if (page.value, slug) in settings.SINGLETON_SLOTS:
        return SlotCardinality.SINGLETON
    return SlotCardinality.ORDERED


def is_singleton(page: Union[PageType, str], slug: str) -> bool:
    return cardinality_of(page, slug) == SlotCardinality.SINGLETON


__all__ = [
    "SlotCardinality",
    "SLOT_CARDINALITY",
    "cardinality_of",
    "is_singleton",
]
