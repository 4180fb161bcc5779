"""Tests for FieldBag accessors."""

from datetime import datetime, timezone

from contentstack_kit.models.response import FieldBag


class TestFieldBag:
    """Tests for typed accessors."""

    def test_typed_accessors(self) -> None:
        """Test accessors return values of the matching type."""
        bag = FieldBag(
            {
                "title": "Gold",
                "count": 3,
                "price": 12.5,
                "active": True,
                "tags": ["a"],
                "seo": {"title": "x"},
            }
        )

        assert bag.get_str("title") == "Gold"
        assert bag.get_int("count") == 3
        assert bag.get_float("price") == 12.5
        assert bag.get_float("count") == 3.0
        assert bag.get_bool("active") is True
        assert bag.get_list("tags") == ["a"]
        nested = bag.get_bag("seo")
        assert isinstance(nested, FieldBag)
        assert nested.get_str("title") == "x"

    def test_mismatch_and_absence_return_none(self) -> None:
        """Test wrong types and missing keys yield None."""
        bag = FieldBag({"title": "Gold", "active": True})

        assert bag.get_int("title") is None
        assert bag.get_int("active") is None
        assert bag.get_str("missing") is None
        assert bag.get_bag("title") is None
        assert bag.get_list("title") is None

    def test_datetime(self) -> None:
        """Test ISO timestamps with a Z suffix are parsed."""
        bag = FieldBag({"updated_at": "2024-01-02T03:04:05.000Z", "title": "x"})

        assert bag.get_datetime("updated_at") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert bag.get_datetime("title") is None

    def test_system_properties(self) -> None:
        """Test shortcuts for system fields."""
        bag = FieldBag({"uid": "blt1", "title": "Gold", "_content_type_uid": "product"})

        assert bag.uid == "blt1"
        assert bag.title == "Gold"
        assert bag.content_type_uid == "product"
        assert bag == {"uid": "blt1", "title": "Gold", "_content_type_uid": "product"}
