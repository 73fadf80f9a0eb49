"""Tests for order slot validation."""

import pytest

from llm.conversation_store import Session
from ordering.slot_validator import SLOT_NAMES, SlotValidator


@pytest.fixture
def validator():
    return SlotValidator()


class TestMerge:
    def test_last_write_wins(self, validator):
        merged = validator.merge({"name": "Ann", "order": "latte"}, {"order": "mocha"})
        assert merged == {"name": "Ann", "order": "mocha"}

    def test_absent_keys_untouched(self, validator):
        merged = validator.merge({"name": "Ann"}, {"email": "ann@example.com"})
        assert merged == {"name": "Ann", "email": "ann@example.com"}

    def test_unknown_keys_dropped(self, validator):
        merged = validator.merge({}, {"name": "Ann", "coupon": "FREE"})
        assert merged == {"name": "Ann"}

    def test_idempotent(self, validator):
        extracted = {"name": "Ann", "phone": "123"}
        once = validator.merge({"order": "latte"}, extracted)
        twice = validator.merge(once, extracted)
        assert once == twice

    def test_does_not_mutate_inputs(self, validator):
        current = {"name": "Ann"}
        validator.merge(current, {"name": "Bo"})
        assert current == {"name": "Ann"}


class TestCompleteness:
    def test_complete(self, validator, complete_slots):
        assert validator.is_complete(complete_slots)
        assert validator.missing(complete_slots) == []

    def test_four_present_one_empty(self, validator, complete_slots):
        complete_slots["phone"] = ""
        assert not validator.is_complete(complete_slots)
        assert validator.missing(complete_slots) == ["phone"]

    def test_whitespace_only_counts_as_empty(self, validator, complete_slots):
        complete_slots["address"] = "   "
        assert not validator.is_complete(complete_slots)

    def test_missing_key(self, validator, complete_slots):
        del complete_slots["order"]
        assert validator.missing(complete_slots) == ["order"]

    def test_empty(self, validator):
        assert validator.missing({}) == list(SLOT_NAMES)


class TestApply:
    def test_apply_updates_session(self, validator, complete_slots):
        session = Session(user_id="1", display_name="Ann", slots={"name": "Ann", "email": "a@b.c"})
        session, complete = validator.apply(session, {"phone": "1", "address": "x", "order": "y"})
        assert complete
        assert session.slots["phone"] == "1"

    def test_apply_twice_same_result(self, validator):
        session = Session(user_id="1", display_name="Ann")
        validator.apply(session, {"name": "Ann"})
        first = dict(session.slots)
        validator.apply(session, {"name": "Ann"})
        assert session.slots == first

    def test_empty_value_overwrites(self, validator, complete_slots):
        session = Session(user_id="1", display_name="Ann", slots=dict(complete_slots))
        session, complete = validator.apply(session, {"email": ""})
        assert not complete
