"""
test_person_manager.py
----------------------
Unit tests for PersonManager: profile fields, the family graph and
attribute values.
"""
import pytest
from datetime import date

from mementos.core.exceptions import NotFoundError, ValidationError
from mementos.database.models import MaritalStatus
from mementos.database.updates import CLEARED, SetTo


class TestCreatePerson:
    """Test PersonManager.create() method."""

    def test_create_with_profile(self, person_manager):
        person = person_manager.create({
            "name": "Carol",
            "email": "carol@example.com",
            "role": "Designer",
            "date_of_birth": "1990-02-03",
            "marital_status": "Married",
        })

        assert person.name == "Carol"
        assert person.date_of_birth == date(1990, 2, 3)
        assert person.marital_status is MaritalStatus.MARRIED

    def test_create_requires_name(self, person_manager):
        with pytest.raises(ValidationError, match="'name'"):
            person_manager.create({"name": "   "})

    def test_unknown_marital_status_rejected(self, person_manager):
        with pytest.raises(ValidationError, match="marital_status"):
            person_manager.create({"name": "Dan", "marital_status": "complicated"})

    def test_create_with_spouse_is_symmetric(self, person_manager, alice):
        carol = person_manager.create({"name": "Carol", "spouse_id": alice.id})

        assert carol.spouse is alice
        assert alice.spouse is carol

    def test_create_with_children(self, person_manager, alice, bob):
        parent = person_manager.create(
            {"name": "Carol", "children_ids": [alice.id, bob.id]}
        )

        assert {c.id for c in parent.children} == {alice.id, bob.id}
        assert [p.id for p in alice.parents] == [parent.id]

    def test_create_with_attributes(self, person_manager, attribute_manager):
        person = person_manager.create({
            "name": "Carol",
            "attributes": [{"attribute": "Nickname", "value": "Caz"}],
        })

        assert [(a.name, a.value) for a in person.attributes] == [("Nickname", "Caz")]
        assert attribute_manager.list_by_entity_type("person")[0].name == "Nickname"


class TestUpdatePerson:
    """Test PersonManager.update() method."""

    def test_partial_update(self, person_manager, alice):
        person_manager.update(alice.id, {"role": SetTo("Engineer")})
        person_manager.update(alice.id, {"email": SetTo("a@example.com")})

        assert alice.role == "Engineer"
        assert alice.email == "a@example.com"

    def test_clear_name_rejected(self, person_manager, alice):
        with pytest.raises(ValidationError):
            person_manager.update(alice.id, {"name": CLEARED})

    def test_self_spouse_rejected(self, person_manager, alice):
        with pytest.raises(ValidationError, match="own spouse"):
            person_manager.update(alice.id, {"spouse_id": SetTo(alice.id)})

    def test_self_child_rejected(self, person_manager, alice):
        with pytest.raises(ValidationError, match="own child"):
            person_manager.update(alice.id, {"children_ids": SetTo([alice.id])})

    def test_remarriage_detaches_previous_spouses(self, person_manager, alice, bob):
        carol = person_manager.create({"name": "Carol"})
        person_manager.update(alice.id, {"spouse_id": SetTo(bob.id)})

        person_manager.update(carol.id, {"spouse_id": SetTo(bob.id)})

        assert bob.spouse is carol
        assert carol.spouse is bob
        assert alice.spouse is None

    def test_clear_spouse_clears_both_sides(self, person_manager, alice, bob):
        person_manager.update(alice.id, {"spouse_id": SetTo(bob.id)})
        person_manager.update(alice.id, {"spouse_id": CLEARED})

        assert alice.spouse is None
        assert bob.spouse is None

    def test_replace_attributes(self, person_manager, alice):
        person_manager.update(alice.id, {"attributes": SetTo([
            {"attribute": "Nickname", "value": "Al"},
            {"attribute": "Hobby", "value": "Chess"},
        ])})
        person_manager.update(alice.id, {"attributes": SetTo([
            {"attribute": "nickname", "value": "Ally"},
        ])})

        assert [(a.name, a.value) for a in alice.attributes] == [("Nickname", "Ally")]

    def test_spouse_of_other_user_not_found(self, person_manager, other_scope, alice):
        theirs = other_scope.people.create({"name": "Eve"})
        with pytest.raises(NotFoundError):
            person_manager.update(alice.id, {"spouse_id": SetTo(theirs.id)})


class TestReadPeople:
    """Test get(), get_all() and search()."""

    def test_get_all_newest_first(self, person_manager, alice, bob):
        assert [p.id for p in person_manager.get_all()] == [bob.id, alice.id]

    def test_search_by_role(self, person_manager, alice):
        person_manager.update(alice.id, {"role": SetTo("Product Designer")})
        assert [p.id for p in person_manager.search("design")] == [alice.id]

    def test_search_underscore_is_not_a_wildcard(self, person_manager, alice):
        person_manager.create({"name": "Alex"})
        assert person_manager.search("A_e") == []
        assert person_manager.search("l_x") == []

    def test_other_users_people_hidden(self, person_manager, other_scope):
        other_scope.people.create({"name": "Eve"})
        assert person_manager.search("eve") == []


class TestDeletePerson:
    """Test PersonManager.delete() method."""

    def test_delete_clears_spouse_back_reference(self, person_manager, alice, bob):
        person_manager.update(alice.id, {"spouse_id": SetTo(bob.id)})

        person_manager.delete(alice.id)

        assert bob.spouse is None
        with pytest.raises(NotFoundError):
            person_manager.get(alice.id)

    def test_delete_unlinks_memories(
        self, db_session, person_manager, memory_manager, alice, photo
    ):
        memory_manager.update(photo.id, {"people_ids": SetTo([alice.id])})

        person_manager.delete(alice.id)
        db_session.expire_all()

        assert memory_manager.get(photo.id).people == []
