"""
Carousel Item Ledger.

CRUD and ordering for the members of a carousel. Every write validates
the kind/reference pair through the item kind registry before the store
is touched, and runs as one unit of work: either all of it is committed
or none of it is.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lifestyle_cms.core.logging import get_logger
from lifestyle_cms.db.deps import DBSession
from lifestyle_cms.models.carousel import (
    REFERENCE_FIELDS,
    Carousel,
    CarouselItem,
    ItemKind,
    PageType,
)
from lifestyle_cms.services.carousel_store import CarouselStore, parse_page
from lifestyle_cms.services.errors import (
    CarouselItemNotFoundError,
    CarouselNotFoundError,
    ConstraintViolationError,
    SlotCardinalityError,
    store_operation,
    store_read,
)
from lifestyle_cms.services.item_kinds import (
    ItemReference,
    parse_kind,
    reference_field,
    resolve_reference,
)
from lifestyle_cms.services.reorder import display_order, shift_down_after
from lifestyle_cms.services.slot_cardinality import is_singleton

logger = get_logger(__name__)

# Item columns that update_item() accepts besides the reference columns
DISPLAY_FIELDS = ("caption", "image_path", "badge")
EDITABLE_FIELDS = ("order_index", "is_active", "is_featured") + DISPLAY_FIELDS


class CarouselItemLedger:
    """
    Service for the ordered members of carousels.

    Example:
        >>> ledger = CarouselItemLedger(db)
        >>> item = await ledger.create_item(carousel.id, "recipe", "R1", caption="Tahini bowl")
        >>> await ledger.list_items(carousel.id)
        [CarouselItem(id=1, carousel_id=1, kind=recipe, reference='R1', order=0)]
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.carousels = CarouselStore(db)

    # ========================================
    # Reads
    # ========================================

    async def list_items(
        self,
        carousel_id: int,
        include_inactive: bool = False
    ) -> List[CarouselItem]:
        """
        Items of a carousel by order_index ascending.

        Public callers get active items only; admin views pass
        include_inactive=True to see hidden ones as well.
        """
        query = (
            select(CarouselItem)
            .where(CarouselItem.carousel_id == carousel_id)
            .order_by(*display_order())
            .execution_options(populate_existing=True)
        )
        if not include_inactive:
            query = query.where(CarouselItem.is_active.is_(True))

        async with store_read("list_items", carousel_id=carousel_id):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def get_item(self, item_id: int) -> CarouselItem:
        """
        Get an item by id.

        Raises:
            CarouselItemNotFoundError: No item has this id
        """
        async with store_read("get_item", item_id=item_id):
            item = await self.db.get(CarouselItem, item_id, populate_existing=True)
        if item is None:
            raise CarouselItemNotFoundError(
                f"Carousel item not found: {item_id}",
                item_id=item_id
            )
        return item

    async def find_by_reference(
        self,
        carousel_id: int,
        reference: str,
        kind: Optional[Union[ItemKind, str]] = None
    ) -> Optional[CarouselItem]:
        """
        Find the item pointing at `reference` within a carousel.

        With a kind, only that kind's reference column is compared;
        without one, any reference column may match. Inactive items count.
        """
        query = (
            select(CarouselItem)
            .where(CarouselItem.carousel_id == carousel_id)
            .order_by(*display_order())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        if kind is not None:
            ref = resolve_reference(kind, reference)
            query = query.where(
                CarouselItem.kind == ref.kind,
                getattr(CarouselItem, ref.field) == ref.value
            )
        else:
            query = query.where(
                or_(*(getattr(CarouselItem, field) == reference for field in REFERENCE_FIELDS))
            )

        async with store_read("find_item_by_reference", carousel_id=carousel_id, reference=reference):
            result = await self.db.execute(query)
            return result.scalar_one_or_none()

    async def next_order_index(self, carousel_id: int) -> int:
        """Position just past the last item (0 for an empty carousel)."""
        async with store_read("next_order_index", carousel_id=carousel_id):
            result = await self.db.execute(
                select(func.max(CarouselItem.order_index))
                .where(CarouselItem.carousel_id == carousel_id)
            )
            current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def list_page_items(
        self,
        page: Union[PageType, str],
        slug: Optional[str] = None
    ) -> List[Tuple[CarouselItem, Carousel]]:
        """
        Render-ready items of a page: active items of active carousels,
        each paired with its carousel, by order_index.
        """
        page = parse_page(page)
        query = (
            select(CarouselItem, Carousel)
            .join(Carousel, Carousel.id == CarouselItem.carousel_id)
            .where(
                Carousel.page == page,
                Carousel.is_active.is_(True),
                CarouselItem.is_active.is_(True),
            )
            .order_by(*display_order())
        )
        if slug:
            query = query.where(Carousel.slug == slug)

        async with store_read("list_page_items", page=page.value, slug=slug):
            result = await self.db.execute(query)
            return [(row[0], row[1]) for row in result.all()]

    # ========================================
    # Writes
    # ========================================

    def _require_ordered(self, carousel: Carousel) -> None:
        """Refuse plain item writes into a singleton slot; those go through the slot policy."""
        if is_singleton(carousel.page, carousel.slug):
            raise SlotCardinalityError(
                f"Carousel {carousel.page}/{carousel.slug} is a singleton slot; "
                "use set_singleton or promote",
                carousel_id=carousel.id,
            )

    def _build_item(
        self,
        carousel_id: int,
        ref: ItemReference,
        order_index: int,
        is_active: bool = True,
        is_featured: Optional[bool] = None,
        caption: Optional[str] = None,
        image_path: Optional[str] = None,
        badge: Optional[str] = None,
    ) -> CarouselItem:
        """Pending (not yet added) item row for an already-validated reference."""
        return CarouselItem(
            carousel_id=carousel_id,
            kind=ref.kind,
            order_index=order_index,
            is_active=is_active,
            is_featured=is_featured,
            caption=caption,
            image_path=image_path,
            badge=badge,
            **ref.as_columns(),
        )

    async def create_item(
        self,
        carousel_id: int,
        kind: Union[ItemKind, str, None],
        reference: Optional[str] = None,
        order_index: Optional[int] = None,
        caption: Optional[str] = None,
        is_active: bool = True,
        is_featured: Optional[bool] = None,
        image_path: Optional[str] = None,
        badge: Optional[str] = None,
        **reference_fields: Optional[str],
    ) -> CarouselItem:
        """
        Attach content to a carousel.

        The reference is validated before anything else happens, so a
        missing or mismatched reference never reaches the store.
        order_index defaults to the end of the carousel.

        Raises:
            UnknownKindError / MissingReferenceError: invalid kind or reference
            CarouselNotFoundError: carousel_id does not exist
            SlotCardinalityError: the carousel is a singleton slot
            ConstraintViolationError: the store rejected the row
        """
        ref = resolve_reference(kind, reference, **reference_fields)
        self._require_ordered(await self.carousels.get(carousel_id))

        if order_index is None:
            order_index = await self.next_order_index(carousel_id)

        item = self._build_item(
            carousel_id,
            ref,
            order_index,
            is_active=is_active,
            is_featured=is_featured,
            caption=caption,
            image_path=image_path,
            badge=badge,
        )
        async with store_operation(self.db, "create_item", carousel_id=carousel_id, kind=ref.kind.value):
            self.db.add(item)

        logger.info(
            "carousel_item_created",
            item_id=item.id,
            carousel_id=carousel_id,
            kind=ref.kind.value,
            reference=ref.value,
            order_index=order_index,
        )
        return item

    async def update_item(self, item_id: int, changes: Dict[str, Any]) -> CarouselItem:
        """
        Apply a partial update to an item.

        Changing `kind` and/or a reference (`reference` or the column
        itself) re-validates the pair; the kind's column is set and the
        others cleared. Switching between kinds that share a column
        (recipe → product) keeps the existing value.

        A new order_index is written as-is: no collision resolution is
        done, and two items may end up sharing a position.
        """
        item = await self.get_item(item_id)

        reference_keys = {"kind", "reference", *REFERENCE_FIELDS}
        invalid = set(changes) - reference_keys - set(EDITABLE_FIELDS)
        if invalid:
            raise ConstraintViolationError(
                f"Carousel item field(s) not editable: {', '.join(sorted(invalid))}",
                item_id=item_id,
            )

        ref = None
        if reference_keys & set(changes):
            kind = parse_kind(changes.get("kind", item.kind))
            own_field = reference_field(kind)
            supplied = {field: changes[field] for field in REFERENCE_FIELDS if field in changes}
            reference = changes.get("reference")
            if (
                "reference" not in changes
                and own_field not in supplied
                and reference_field(item.kind) == own_field
            ):
                # Kind changed within a shared column (recipe -> product): keep the value
                reference = item.reference
            ref = resolve_reference(kind, reference, **supplied)

        async with store_operation(self.db, "update_item", item_id=item_id):
            if ref is not None:
                item.kind = ref.kind
                for field, value in ref.as_columns().items():
                    setattr(item, field, value)
            for field in EDITABLE_FIELDS:
                if field in changes:
                    setattr(item, field, changes[field])

        logger.info("carousel_item_updated", item_id=item_id, fields=sorted(changes))
        return item

    async def delete_item(self, item_id: int, close_gaps: bool = True) -> None:
        """
        Detach an item from its carousel.

        The backing entity is not touched. Items after it move up one
        position so the carousel stays dense.

        Raises:
            CarouselItemNotFoundError: No item has this id
        """
        item = await self.get_item(item_id)
        await self._remove(item, close_gaps=close_gaps, operation="delete_item")

    async def remove_by_reference(
        self,
        carousel_id: int,
        reference: str,
        kind: Optional[Union[ItemKind, str]] = None
    ) -> bool:
        """
        Delete the item pointing at `reference` in a carousel.

        Idempotent: returns False (not an error) when nothing matched.
        """
        item = await self.find_by_reference(carousel_id, reference, kind=kind)
        if item is None:
            logger.info("carousel_item_absent", carousel_id=carousel_id, reference=reference)
            return False

        await self._remove(item, close_gaps=True, operation="remove_by_reference")
        return True

    async def _remove(self, item: CarouselItem, close_gaps: bool, operation: str) -> None:
        carousel_id, order_index, item_id = item.carousel_id, item.order_index, item.id

        async with store_operation(self.db, operation, item_id=item_id, carousel_id=carousel_id):
            await self.db.execute(delete(CarouselItem).where(CarouselItem.id == item_id))
            if close_gaps:
                await shift_down_after(self.db, carousel_id, order_index)

        logger.info(
            "carousel_item_deleted",
            item_id=item_id,
            carousel_id=carousel_id,
            order_index=order_index,
        )

    async def move_item(
        self,
        item_id: int,
        page: Union[PageType, str],
        slug: str,
        order_index: Optional[int] = None
    ) -> CarouselItem:
        """
        Move an item into the (page, slug) carousel.

        The source carousel is compacted and the item lands at the end of
        the target unless order_index is given.

        Raises:
            CarouselNotFoundError: The target carousel does not exist
            SlotCardinalityError: The target is a singleton slot (use promote)
        """
        item = await self.get_item(item_id)
        target = await self.carousels.find_by_page_slug(page, slug)
        if target is None:
            raise CarouselNotFoundError(
                f"Target carousel not found: {page}/{slug}",
                page=str(page),
                slug=slug,
            )
        self._require_ordered(target)
        if target.id == item.carousel_id:
            if order_index is not None and order_index != item.order_index:
                return await self.update_item(item_id, {"order_index": order_index})
            return item

        source_id, source_index = item.carousel_id, item.order_index
        if order_index is None:
            order_index = await self.next_order_index(target.id)

        async with store_operation(self.db, "move_item", item_id=item_id, target_carousel_id=target.id):
            item.carousel_id = target.id
            item.order_index = order_index
            await self.db.flush()
            await shift_down_after(self.db, source_id, source_index)

        logger.info(
            "carousel_item_moved",
            item_id=item_id,
            source_carousel_id=source_id,
            target_carousel_id=target.id,
            order_index=order_index,
        )
        return item


# ========================================
# Dependency Injection
# ========================================

def get_carousel_item_ledger(db: DBSession) -> CarouselItemLedger:
    """Dependency for injecting CarouselItemLedger."""
    return CarouselItemLedger(db)
