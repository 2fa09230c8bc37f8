"""Tests for the result cache."""

import os
import sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.result_cache import ResultCache, make_key
from model.Assumptions import ProjectionAssumptions, LEGACY


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResultCache(ttl_seconds=300, clock=clock)


PROFILE = {"currentAge": 30, "retirementAge": 67, "currentMonthlySalary": 20000}


def test_key_ignores_dict_order():
    assert make_key("score", {"a": 1, "b": 2}) == make_key("score", {"b": 2, "a": 1})


def test_key_changes_with_any_input():
    base = make_key("score", PROFILE)
    assert make_key("project", PROFILE) != base
    assert make_key("score", dict(PROFILE, currentAge=31)) != base
    assert make_key("score", dict(PROFILE, note="x")) != base


def test_key_includes_assumptions():
    monthly = make_key("project", PROFILE, ProjectionAssumptions())
    legacy = make_key("project", PROFILE, ProjectionAssumptions(compounding=LEGACY))
    assert monthly != legacy
    assert monthly == make_key("project", PROFILE, ProjectionAssumptions().to_dict())


def test_miss_then_hit(cache):
    assert cache.get("score", PROFILE) is None
    cache.set("score", PROFILE, {"total": 70})
    assert cache.get("score", PROFILE) == {"total": 70}
    assert cache.stats()["hits"] == 1
    assert cache.stats()["misses"] == 1


def test_returned_values_are_copies(cache):
    value = {"factors": [1, 2]}
    cache.set("score", PROFILE, value)
    value["factors"].append(3)
    cached = cache.get("score", PROFILE)
    assert cached == {"factors": [1, 2]}
    cached["factors"].append(4)
    assert cache.get("score", PROFILE) == {"factors": [1, 2]}


def test_entries_expire(cache, clock):
    cache.set("score", PROFILE, 1)
    clock.now += 299
    assert cache.get("score", PROFILE) == 1
    clock.now += 1
    assert cache.get("score", PROFILE) is None
    assert len(cache) == 0


def test_get_or_compute_computes_once(cache):
    calls = []

    def compute():
        calls.append(1)
        return {"total": 55}

    assert cache.get_or_compute("score", PROFILE, compute) == {"total": 55}
    assert cache.get_or_compute("score", PROFILE, compute) == {"total": 55}
    assert len(calls) == 1


def test_cached_none_is_not_recomputed(cache):
    calls = []

    def compute():
        calls.append(1)
        return None

    cache.get_or_compute("score", PROFILE, compute)
    cache.get_or_compute("score", PROFILE, compute)
    assert len(calls) == 1


def test_purge_expired(cache, clock):
    cache.set("score", PROFILE, 1)
    clock.now += 200
    cache.set("project", PROFILE, 2)
    clock.now += 150
    assert cache.purge_expired() == 1
    assert cache.get("project", PROFILE) == 2


def test_set_drops_expired_entries(cache, clock):
    cache.set("score", PROFILE, 1)
    cache.set("score", dict(PROFILE, currentAge=31), 2)
    clock.now += 301
    cache.set("project", PROFILE, 3)
    assert len(cache) == 1
    assert cache.get("project", PROFILE) == 3


def test_invalidate(cache):
    cache.set("score", PROFILE, 1)
    cache.set("project", PROFILE, 2)
    cache.invalidate()
    assert len(cache) == 0
    assert cache.stats()["entries"] == 0
