"""Tests for optimistic mutations."""
import pytest
from unittest.mock import MagicMock

from mementos.client import Mutation, MutationRunner, QueryCache
from mementos.client.mutations import merge_in_list, replace_in_list
from mementos.core.logging_manager import MementosLogger


@pytest.fixture
def cache():
    cache = QueryCache()
    cache.set(("people",), [{"id": 1, "role": "Cook"}])
    cache.set(("person", 1), {"id": 1, "role": "Cook"})
    return cache


def _guess(cache):
    cache.update(("person", 1), lambda p: {**p, "role": "Chef"})


class TestMutationRunner:

    def test_success_reconciles_and_invalidates(self, cache):
        seen = {}

        def run():
            seen["during"] = cache.get(("person", 1))["role"]
            return {"id": 1, "role": "Head chef"}

        result = MutationRunner(cache).execute(Mutation(
            run=run,
            affected=[("person", 1)],
            optimistic=_guess,
            reconcile=lambda c, person: c.set(("person", 1), person),
            invalidate=[("people",)],
        ))

        assert seen["during"] == "Chef"
        assert result["role"] == "Head chef"
        assert cache.get(("person", 1))["role"] == "Head chef"
        assert cache.is_stale(("people",))

    def test_failure_rolls_back_and_reraises(self, cache):
        logger = MagicMock(spec=MementosLogger)

        with pytest.raises(RuntimeError, match="server said no"):
            MutationRunner(cache, logger).execute(Mutation(
                run=MagicMock(side_effect=RuntimeError("server said no")),
                affected=[("person", 1)],
                optimistic=_guess,
                invalidate=[("people",)],
                name="update_person",
            ))

        assert cache.get(("person", 1)) == {"id": 1, "role": "Cook"}
        assert cache.is_stale(("people",))
        details = logger.log_warning.call_args[0][1]
        assert details["mutation"] == "update_person"

    def test_without_optimistic_step(self, cache):
        result = MutationRunner(cache).execute(Mutation(run=lambda: 42))
        assert result == 42


class TestListHelpers:

    def test_replace_in_list(self):
        rows = [{"id": 1, "a": 1}, {"id": 2, "a": 2}]
        assert replace_in_list(rows, {"id": 2, "a": 3}) == [{"id": 1, "a": 1}, {"id": 2, "a": 3}]

    def test_merge_in_list(self):
        rows = [{"id": 1, "a": 1, "b": 1}]
        assert merge_in_list(rows, 1, {"b": 2}) == [{"id": 1, "a": 1, "b": 2}]

    def test_non_list_untouched(self):
        assert merge_in_list(None, 1, {}) is None
        assert replace_in_list(None, {"id": 1}) is None
