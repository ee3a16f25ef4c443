"""
test_memory_manager.py
----------------------
Unit tests for MemoryManager CRUD operations.
"""
import pytest

from mementos.core.exceptions import ConflictError, NotFoundError, ValidationError
from mementos.database.models import DateType, MediaType
from mementos.database.updates import CLEARED, SetTo


class TestCreateMemory:
    """Test MemoryManager.create() method."""

    def test_create_minimal(self, memory_manager):
        memory = memory_manager.create({"title": "  Beach  "})

        assert memory.id is not None
        assert memory.title == "Beach"
        assert memory.media_type is MediaType.PHOTO
        assert memory.date_type is DateType.EXACT
        assert memory.place is None
        assert memory.event is None

    def test_create_requires_title(self, memory_manager):
        with pytest.raises(ValidationError):
            memory_manager.create({"description": "no title"})

    def test_create_with_media(self, memory_manager):
        memory = memory_manager.create({
            "title": "Contract",
            "media_type": "document",
            "media_url": "http://localhost:8000/api/uploads/abc_contract.pdf",
            "media_name": "contract.pdf",
            "media_size": 2048,
        })

        assert memory.media_type is MediaType.DOCUMENT
        assert memory.media_size == 2048

    def test_negative_media_size_rejected(self, memory_manager):
        with pytest.raises(ValidationError):
            memory_manager.create({"title": "X", "media_size": -1})

    def test_create_with_event_takes_its_place(self, memory_manager, lunch, cafe):
        memory = memory_manager.create({"title": "At lunch", "event_id": lunch.id})

        assert memory.event is lunch
        assert memory.place is cafe

    def test_create_with_matching_place_and_event(self, memory_manager, lunch, cafe):
        memory = memory_manager.create(
            {"title": "At lunch", "event_id": lunch.id, "place_id": cafe.id}
        )
        assert memory.place is cafe

    def test_create_with_conflicting_place_rejected(self, memory_manager, lunch, office):
        with pytest.raises(ConflictError):
            memory_manager.create(
                {"title": "At lunch", "event_id": lunch.id, "place_id": office.id}
            )
        assert memory_manager.count() == 0

    def test_create_with_conflicting_place_in_lax_mode(self, lax_scope, lunch, office):
        memory = lax_scope.memories.create(
            {"title": "At lunch", "event_id": lunch.id, "place_id": office.id}
        )
        assert memory.event is lunch
        assert memory.place is office

    def test_create_with_people(self, memory_manager, alice, bob):
        memory = memory_manager.create(
            {"title": "Group", "people_ids": [alice.id, bob.id, alice.id]}
        )
        assert [p.id for p in memory.people] == [alice.id, bob.id]

    def test_create_with_unknown_person_rejected(self, memory_manager):
        with pytest.raises(NotFoundError):
            memory_manager.create({"title": "Group", "people_ids": [4242]})

    def test_date_truncated_to_precision(self, memory_manager):
        memory = memory_manager.create(
            {"title": "Summer", "date": "2023-07-19T15:00:00Z", "date_type": "year"}
        )
        assert (memory.date.year, memory.date.month, memory.date.day) == (2023, 1, 1)
        assert memory.date.hour == 0


class TestGetMemory:
    """Test get(), get_all(), search() and count()."""

    def test_get_missing_raises(self, memory_manager):
        with pytest.raises(NotFoundError, match="Memory not found"):
            memory_manager.get(12345)

    def test_get_other_users_memory_raises(self, memory_manager, other_scope):
        theirs = other_scope.memories.create({"title": "Private"})
        with pytest.raises(NotFoundError):
            memory_manager.get(theirs.id)

    def test_get_all_newest_date_first(self, memory_manager):
        old = memory_manager.create({"title": "Old", "date": "2001-01-01"})
        new = memory_manager.create({"title": "New", "date": "2024-01-01"})
        undated = memory_manager.create({"title": "Undated"})

        assert [m.id for m in memory_manager.get_all()] == [new.id, old.id, undated.id]

    def test_get_all_only_own(self, memory_manager, other_scope, photo):
        other_scope.memories.create({"title": "Private"})
        assert [m.id for m in memory_manager.get_all()] == [photo.id]

    def test_search_case_insensitive(self, memory_manager, photo):
        memory_manager.create({"title": "Beach", "description": "Waves"})

        assert [m.title for m in memory_manager.search("LUNCH")] == ["Lunch photo"]
        assert [m.title for m in memory_manager.search("wave")] == ["Beach"]

    def test_empty_search_lists_all(self, memory_manager, photo):
        assert len(memory_manager.search("  ")) == 1

    def test_count(self, memory_manager, photo, other_scope):
        other_scope.memories.create({"title": "Private"})
        assert memory_manager.count() == 1


class TestUpdateMemory:
    """Test MemoryManager.update() method."""

    def test_omitted_fields_unchanged(self, memory_manager):
        memory = memory_manager.create({"title": "Beach", "description": "Waves"})
        memory_manager.update(memory.id, {"title": SetTo("Coast")})

        assert memory.title == "Coast"
        assert memory.description == "Waves"

    def test_cleared_field(self, memory_manager):
        memory = memory_manager.create({"title": "Beach", "description": "Waves"})
        memory_manager.update(memory.id, {"description": CLEARED})
        assert memory.description is None

    def test_update_event_then_place_order(self, memory_manager, photo, lunch, cafe):
        memory = memory_manager.update(
            photo.id, {"event_id": SetTo(lunch.id), "place_id": SetTo(cafe.id)}
        )
        assert memory.event is lunch
        assert memory.place is cafe

    def test_conflicting_update_rolls_back_everything(
        self, memory_manager, photo, lunch, office
    ):
        with pytest.raises(ConflictError):
            memory_manager.update(
                photo.id,
                {
                    "title": SetTo("Changed"),
                    "event_id": SetTo(lunch.id),
                    "place_id": SetTo(office.id),
                },
            )

        memory = memory_manager.get(photo.id)
        assert memory.title == "Lunch photo"
        assert memory.event is None
        assert memory.place is None

    def test_update_people(self, memory_manager, photo, alice, bob):
        memory_manager.update(photo.id, {"people_ids": SetTo([alice.id, bob.id])})
        memory_manager.update(photo.id, {"people_ids": CLEARED})
        assert photo.people == []

    def test_media_type_cannot_be_cleared(self, memory_manager, photo):
        with pytest.raises(ValidationError):
            memory_manager.update(photo.id, {"media_type": CLEARED})


class TestDeleteMemory:
    """Test MemoryManager.delete() method."""

    def test_delete_removes_reflections(self, memory_manager, reflection_manager, photo):
        reflection = reflection_manager.add(photo.id, "Why", "Because")

        memory_manager.delete(photo.id)

        with pytest.raises(NotFoundError):
            memory_manager.get(photo.id)
        with pytest.raises(NotFoundError):
            reflection_manager.get(reflection.id)

    def test_delete_keeps_people_and_event(
        self, db_session, memory_manager, person_manager, event_manager, lunch, alice
    ):
        memory = memory_manager.create(
            {"title": "Lunch", "event_id": lunch.id, "people_ids": [alice.id]}
        )
        memory_manager.delete(memory.id)
        db_session.expire_all()

        assert person_manager.get(alice.id).memories == []
        assert event_manager.get(lunch.id).memories == []
