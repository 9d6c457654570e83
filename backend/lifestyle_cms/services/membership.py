"""
Membership Toggle Service.

Boolean-like flags on domain entities (favorite recipe, storefront top
pick, beginner-friendly) are stored as membership in a dedicated carousel
rather than as columns on the entity. Toggling is idempotent so a
double-fired UI button is harmless.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.core.logging import get_logger
from lifestyle_cms.db.deps import DBSession
from lifestyle_cms.models.carousel import CarouselItem, ItemKind, PageType
from lifestyle_cms.services.carousel_items import CarouselItemLedger
from lifestyle_cms.services.carousel_store import CarouselStore, parse_page
from lifestyle_cms.services.errors import SlotCardinalityError
from lifestyle_cms.services.item_kinds import parse_kind, resolve_reference
from lifestyle_cms.services.slot_cardinality import is_singleton

logger = get_logger(__name__)

# Kind assumed for a membership when the caller does not name one
DEFAULT_MEMBER_KIND: Dict[PageType, ItemKind] = {
    PageType.RECIPES: ItemKind.RECIPE,
    PageType.STOREFRONT: ItemKind.PRODUCT,
    PageType.VLOGS: ItemKind.VIDEO,
    PageType.HEALING: ItemKind.VIDEO,
    PageType.HOME: ItemKind.PLAYLIST,
}


@dataclass
class MembershipResult:
    """Outcome of set_membership(): the member item (None when off) and whether anything changed."""

    item: Optional[CarouselItem]
    changed: bool

    @property
    def is_member(self) -> bool:
        return self.item is not None


class MembershipToggleService:
    """
    Service for favorite-like flags expressed as carousel membership.

    Example:
        >>> memberships = MembershipToggleService(db)
        >>> await memberships.set_membership("recipes", "recipes-favorites", "R5", True)
        >>> await memberships.is_member("recipes", "recipes-favorites", "R5")
        True
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.carousels = CarouselStore(db)
        self.ledger = CarouselItemLedger(db)

    def _member_kind(self, page: PageType, kind: Union[ItemKind, str, None]) -> ItemKind:
        if kind is None:
            return DEFAULT_MEMBER_KIND[page]
        return parse_kind(kind)

    async def set_membership(
        self,
        page: Union[PageType, str],
        slug: str,
        domain_id: str,
        on: bool,
        kind: Union[ItemKind, str, None] = None,
        order_index: Optional[int] = None,
        caption: Optional[str] = None,
        image_path: Optional[str] = None,
    ) -> MembershipResult:
        """
        Add or remove `domain_id` as a member of the (page, slug) carousel.

        on=True adds the item at order_index (trailing by default) unless it
        is already a member, in which case a hidden member is made active
        again and a supplied order_index is applied. on=False removes it and closes the gap it leaves. Either
        direction is a no-op when the carousel is already in that state.

        Raises:
            SlotCardinalityError: (page, slug) is a singleton slot
            UnknownKindError / MissingReferenceError: invalid kind or domain_id
        """
        page = parse_page(page)
        if is_singleton(page, slug):
            raise SlotCardinalityError(
                f"Carousel {page.value}/{slug} is a singleton slot, not a membership list",
                page=page.value,
                slug=slug,
            )
        ref = resolve_reference(self._member_kind(page, kind), domain_id)

        carousel = await self.carousels.find_or_create(page, slug)
        existing = await self.ledger.find_by_reference(carousel.id, ref.value, kind=ref.kind)

        if on:
            if existing is not None:
                changes: Dict[str, Any] = {}
                if not existing.is_active:
                    changes["is_active"] = True
                if order_index is not None and order_index != existing.order_index:
                    changes["order_index"] = order_index
                if changes:
                    item = await self.ledger.update_item(existing.id, changes)
                    logger.info(
                        "membership_updated",
                        carousel_id=carousel.id,
                        domain_id=ref.value,
                        fields=sorted(changes),
                    )
                    return MembershipResult(item=item, changed=True)
                logger.info("membership_unchanged", carousel_id=carousel.id, domain_id=ref.value, on=True)
                return MembershipResult(item=existing, changed=False)

            item = await self.ledger.create_item(
                carousel.id,
                ref.kind,
                ref.value,
                order_index=order_index,
                caption=caption,
                image_path=image_path,
            )
            logger.info("membership_added", carousel_id=carousel.id, domain_id=ref.value, item_id=item.id)
            return MembershipResult(item=item, changed=True)

        if existing is None:
            logger.info("membership_unchanged", carousel_id=carousel.id, domain_id=ref.value, on=False)
            return MembershipResult(item=None, changed=False)

        await self.ledger.delete_item(existing.id, close_gaps=True)
        logger.info("membership_removed", carousel_id=carousel.id, domain_id=ref.value)
        return MembershipResult(item=None, changed=True)

    async def is_member(
        self,
        page: Union[PageType, str],
        slug: str,
        domain_id: str,
        kind: Union[ItemKind, str, None] = None,
    ) -> bool:
        page = parse_page(page)
        carousel = await self.carousels.find_by_page_slug(page, slug)
        if carousel is None:
            return False
        item = await self.ledger.find_by_reference(
            carousel.id, domain_id, kind=self._member_kind(page, kind)
        )
        return item is not None

    async def list_members(self, page: Union[PageType, str], slug: str) -> List[CarouselItem]:
        """Members in display order, hidden ones included; a carousel never created has none."""
        carousel = await self.carousels.find_by_page_slug(page, slug)
        if carousel is None:
            return []
        return await self.ledger.list_items(carousel.id, include_inactive=True)


def get_membership_service(db: DBSession) -> MembershipToggleService:
    """Dependency for injecting MembershipToggleService."""
    return MembershipToggleService(db)
