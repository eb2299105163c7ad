from datetime import timedelta

from src.application.region_resolver import RegionResolver
from conftest import TODAY


def test_resolver_distinguishes_absent_and_unknown(store):
    r = RegionResolver(store)
    absent = r.resolve(None)
    assert not absent.supplied and not absent.unknown and absent.region_ids == frozenset()
    unknown = r.resolve("99999")
    assert unknown.supplied and unknown.unknown
    assert r.resolve(" 10115 ").region_ids == frozenset({10, 20})


def test_chain_scope_falls_back_to_chain_regions(store):
    r = RegionResolver(store)
    assert r.for_chain(1, None) == frozenset({10, 11})
    assert r.for_chain(1, "99999") == frozenset({10, 11})
    assert r.for_chain(1, "20095") == frozenset({11})


def test_available_without_postal_code(pricing):
    assert pricing.is_dish_available_for_chain("pasta-pomodoro", 1) is True  # tomato in region 10
    assert pricing.is_dish_available_for_chain("pasta-pomodoro", 2) is True  # pasta in region 20
    assert pricing.is_dish_available_for_chain("salad", 2) is False


def test_optional_lines_never_count(pricing):
    # LIDL only discounts parmesan, which is optional
    assert pricing.is_dish_available_for_chain("pasta-pomodoro", 3) is False


def test_unknown_postal_code_uses_chain_fallback(pricing):
    assert pricing.is_dish_available_for_chain("pasta-pomodoro", 2, "99999") is True
    assert pricing.is_dish_available_for_chain("pasta-pomodoro", 3, "99999") is False


def test_chain_without_regions_is_unavailable(pricing):
    assert pricing.is_dish_available_for_chain("pasta-pomodoro", 42) is False


def test_expired_offers_do_not_count(pricing):
    later = TODAY + timedelta(days=30)
    assert pricing.is_dish_available_for_chain("pasta-pomodoro", 1, today=later) is False


def test_dish_without_recipe_is_unavailable(pricing):
    assert pricing.is_dish_available_for_chain("does-not-exist", 1) is False
