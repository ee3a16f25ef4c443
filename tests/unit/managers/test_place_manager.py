"""
test_place_manager.py
---------------------
Unit tests for PlaceManager CRUD operations.
"""
import pytest

from mementos.core.exceptions import NotFoundError, ValidationError
from mementos.database.models import PlaceType
from mementos.database.updates import CLEARED, SetTo


class TestCreatePlace:
    """Test PlaceManager.create() method."""

    def test_create_full(self, place_manager):
        place = place_manager.create({
            "name": "Blue Bottle",
            "address": "66 Mint St",
            "city": "San Francisco",
            "country": "USA",
            "type": "restaurant",
            "capacity": "40",
            "rating": 4.5,
        })

        assert place.type is PlaceType.RESTAURANT
        assert place.capacity == 40
        assert place.rating == 4.5
        assert place.display_name == "Blue Bottle, San Francisco"

    @pytest.mark.parametrize("missing", ["name", "city", "country"])
    def test_required_fields(self, place_manager, missing):
        metadata = {"name": "Park", "city": "Lisbon", "country": "Portugal"}
        del metadata[missing]
        with pytest.raises(ValidationError, match=missing):
            place_manager.create(metadata)

    @pytest.mark.parametrize("rating", [0.5, 5.1])
    def test_rating_out_of_range(self, place_manager, rating):
        with pytest.raises(ValidationError, match="rating"):
            place_manager.create(
                {"name": "Park", "city": "Lisbon", "country": "Portugal", "rating": rating}
            )

    def test_negative_capacity(self, place_manager):
        with pytest.raises(ValidationError, match="capacity"):
            place_manager.create(
                {"name": "Park", "city": "Lisbon", "country": "Portugal", "capacity": -3}
            )


class TestUpdatePlace:
    """Test PlaceManager.update() method."""

    def test_update_and_clear(self, place_manager, cafe):
        place_manager.update(cafe.id, {"address": SetTo("66 Mint St"), "rating": SetTo(5)})
        place_manager.update(cafe.id, {"address": CLEARED})

        assert cafe.address is None
        assert cafe.rating == 5.0

    def test_city_cannot_be_cleared(self, place_manager, cafe):
        with pytest.raises(ValidationError):
            place_manager.update(cafe.id, {"city": CLEARED})

    def test_attribute_scope_enforced(self, place_manager, attribute_manager, cafe):
        nickname = attribute_manager.create("Nickname", entity_type="person")
        with pytest.raises(ValidationError, match="does not apply"):
            place_manager.update(
                cafe.id,
                {"attributes": SetTo([{"attribute_id": nickname.id, "value": "x"}])},
            )


class TestReadPlaces:
    """Test search and listing."""

    def test_search_by_city(self, place_manager, cafe):
        place_manager.create({"name": "Park", "city": "Lisbon", "country": "Portugal"})
        assert [p.name for p in place_manager.search("francisco")] == ["Blue Bottle Cafe"]

    def test_search_wildcards_match_literally(self, place_manager, cafe, office):
        assert place_manager.search("%") == []
        assert place_manager.search("_") == []

    def test_search_literal_percent(self, place_manager, cafe):
        place_manager.create({"name": "100% Cafe", "city": "Lisbon", "country": "Portugal"})
        assert [p.name for p in place_manager.search("100%")] == ["100% Cafe"]

    def test_get_missing(self, place_manager):
        with pytest.raises(NotFoundError):
            place_manager.get(777)


class TestDeletePlace:
    """Test PlaceManager.delete() method."""

    def test_delete_clears_references(
        self, place_manager, memory_manager, event_manager, cafe, lunch
    ):
        memory = memory_manager.create({"title": "At lunch", "event_id": lunch.id})

        place_manager.delete(cafe.id)

        assert event_manager.get(lunch.id).place is None
        assert memory_manager.get(memory.id).place is None
        assert memory_manager.get(memory.id).event is lunch
        with pytest.raises(NotFoundError):
            place_manager.get(cafe.id)
