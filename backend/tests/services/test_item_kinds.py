"""
Tests for the item kind registry.

Pure validation, no database needed.
"""

import pytest

from lifestyle_cms.models.carousel import REFERENCE_FIELD_BY_KIND, ItemKind
from lifestyle_cms.services.errors import (
    ConstraintViolationError,
    MissingReferenceError,
    ReferenceTooLongError,
    UnknownKindError,
)
from lifestyle_cms.services.item_kinds import (
    ItemReference,
    parse_kind,
    reference_field,
    resolve_reference,
)


class TestParseKind:

    def test_accepts_enum_and_value(self):
        assert parse_kind(ItemKind.ALBUM) is ItemKind.ALBUM
        assert parse_kind("tiktok") is ItemKind.TIKTOK

    @pytest.mark.parametrize("kind", ["podcast", "", None, "VIDEO"])
    def test_unknown_kind(self, kind):
        with pytest.raises(UnknownKindError) as exc_info:
            parse_kind(kind)
        assert exc_info.value.status_code == 422
        assert exc_info.value.code == "unknown_kind"


class TestReferenceFields:

    def test_every_kind_has_a_field(self):
        assert set(REFERENCE_FIELD_BY_KIND) == set(ItemKind)

    @pytest.mark.parametrize(
        "kind,field",
        [
            ("video", "youtube_id"),
            ("album", "album_id"),
            ("recipe", "ref_id"),
            ("product", "ref_id"),
            ("playlist", "ref_id"),
            ("tiktok", "link_url"),
            ("external", "link_url"),
        ],
    )
    def test_reference_field(self, kind, field):
        assert reference_field(kind) == field

    def test_kinds_sharing_ref_id(self):
        shared = {kind for kind, field in REFERENCE_FIELD_BY_KIND.items() if field == "ref_id"}
        assert shared == {ItemKind.RECIPE, ItemKind.PRODUCT, ItemKind.PLAYLIST}


class TestResolveReference:

    def test_reference_at_column_length(self):
        assert resolve_reference("recipe", "R" * 100).value == "R" * 100
        assert resolve_reference("external", "https://x.test/" + "a" * 480).field == "link_url"

    @pytest.mark.parametrize("kind,length", [("recipe", 101), ("video", 101), ("album", 101), ("tiktok", 501)])
    def test_reference_longer_than_column(self, kind, length):
        with pytest.raises(ReferenceTooLongError) as exc_info:
            resolve_reference(kind, "x" * length)
        assert exc_info.value.status_code == 422
        assert exc_info.value.details["max_length"] == length - 1

    def test_generic_reference(self):
        ref = resolve_reference("recipe", "R1")
        assert ref == ItemReference(kind=ItemKind.RECIPE, value="R1")
        assert ref.field == "ref_id"

    def test_own_column_name(self):
        ref = resolve_reference("video", youtube_id="dQw4w9WgXcQ")
        assert ref.value == "dQw4w9WgXcQ"

    def test_own_column_wins_over_generic(self):
        ref = resolve_reference("album", "ignored", album_id="A7")
        assert ref.value == "A7"

    def test_value_is_stripped(self):
        assert resolve_reference("product", "  P9 ").value == "P9"

    def test_as_columns_clears_other_fields(self):
        columns = resolve_reference("tiktok", "https://www.tiktok.com/@cook/video/1").as_columns()
        assert columns == {
            "youtube_id": None,
            "album_id": None,
            "ref_id": None,
            "link_url": "https://www.tiktok.com/@cook/video/1",
        }

    @pytest.mark.parametrize("reference", [None, "", "   "])
    def test_missing_reference(self, reference):
        with pytest.raises(MissingReferenceError) as exc_info:
            resolve_reference("video", reference)
        error = exc_info.value
        assert error.details == {"kind": "video", "field": "youtube_id"}
        assert error.status_code == 422

    def test_other_kinds_column_rejected(self):
        with pytest.raises(ConstraintViolationError):
            resolve_reference("video", youtube_id="abc", ref_id="R1")

    def test_other_kinds_column_set_to_none_is_ignored(self):
        ref = resolve_reference("video", youtube_id="abc", ref_id=None)
        assert ref.value == "abc"

    def test_unknown_field_rejected(self):
        with pytest.raises(ConstraintViolationError):
            resolve_reference("recipe", "R1", recipe_id="R1")

    def test_unknown_kind_checked_first(self):
        with pytest.raises(UnknownKindError):
            resolve_reference("podcast", None)
