"""
Item Kind Registry.

Decides, for every carousel item kind, which reference column must be
populated, and turns loose caller input into an ItemReference: a value
tagged with its kind, from which the column layout of the row follows.

Pure validation - nothing here touches the store.

Example:
    >>> ref = resolve_reference("tiktok", "https://www.tiktok.com/@x/video/1")
    >>> ref.field
    'link_url'
    >>> ref.as_columns()
    {'youtube_id': None, 'album_id': None, 'ref_id': None, 'link_url': 'https://...'}
"""

from dataclasses import dataclass
from typing import Dict, Optional, Union

from lifestyle_cms.models.carousel import (
    REFERENCE_FIELD_BY_KIND,
    REFERENCE_FIELDS,
    CarouselItem,
    ItemKind,
)
from lifestyle_cms.services.errors import (
    ConstraintViolationError,
    MissingReferenceError,
    ReferenceTooLongError,
    UnknownKindError,
)

# Longest value each reference column holds
REFERENCE_MAX_LENGTH: Dict[str, int] = {
    name: CarouselItem.__table__.c[name].type.length for name in REFERENCE_FIELDS
}


@dataclass(frozen=True)
class ItemReference:
    """A reference value tagged with the kind that owns it."""

    kind: ItemKind
    value: str

    @property
    def field(self) -> str:
        return REFERENCE_FIELD_BY_KIND[self.kind]

    def as_columns(self) -> Dict[str, Optional[str]]:
        """Reference columns for an insert/update: ours set, every other one NULL."""
        return {
            name: (self.value if name == self.field else None)
            for name in REFERENCE_FIELDS
        }


def parse_kind(kind: Union[ItemKind, str, None]) -> ItemKind:
    """
    Coerce a caller-supplied kind into an ItemKind.

    Raises:
        UnknownKindError: kind is not one of the registered kinds
    """
    if isinstance(kind, ItemKind):
        return kind
    try:
        return ItemKind(kind)
    except ValueError:
        raise UnknownKindError(kind)


def reference_field(kind: Union[ItemKind, str]) -> str:
    """Name of the reference column the given kind populates."""
    return REFERENCE_FIELD_BY_KIND[parse_kind(kind)]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def resolve_reference(
    kind: Union[ItemKind, str, None],
    reference: Optional[str] = None,
    **fields: Optional[str],
) -> ItemReference:
    """
    Validate the reference for a kind and return it tagged.

    The value can come either as the generic `reference` argument or under
    the kind's own column name (youtube_id=..., link_url=...). Passing a
    different kind's column is rejected: the kind picks the column, not
    the caller.

    Raises:
        UnknownKindError: kind is not registered
        MissingReferenceError: the kind's reference is absent or blank
        ReferenceTooLongError: the reference does not fit its column
        ConstraintViolationError: a reference column for another kind was given
    """
    item_kind = parse_kind(kind)
    field = REFERENCE_FIELD_BY_KIND[item_kind]

    unknown = set(fields) - set(REFERENCE_FIELDS)
    if unknown:
        raise ConstraintViolationError(
            f"Unknown reference field(s): {', '.join(sorted(unknown))}",
            kind=item_kind.value,
        )

    for name, value in fields.items():
        if name != field and _clean(value) is not None:
            raise ConstraintViolationError(
                f"Carousel item of kind '{item_kind.value}' cannot set '{name}'",
                kind=item_kind.value,
                field=name,
            )

    value = _clean(fields.get(field)) or _clean(reference)
    if value is None:
        raise MissingReferenceError(item_kind.value, field)
    if len(value) > REFERENCE_MAX_LENGTH[field]:
        raise ReferenceTooLongError(item_kind.value, field, REFERENCE_MAX_LENGTH[field])

    return ItemReference(kind=item_kind, value=value)


__all__ = [
    "ItemReference",
    "parse_kind",
    "reference_field",
    "resolve_reference",
]
