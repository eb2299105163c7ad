import pytest

from src.application.dish_pricing import DishPricingService, aggregate
from src.domain.entities import LinePrice, RecipeLine
from src.domain.errors import NotFoundError, UnknownPostalCodeError
from conftest import TODAY


def _lp(ingredient_id, base, offer=None, optional=False):
    return LinePrice(
        line=RecipeLine("d1", ingredient_id, 1, "Stk", optional=optional),
        ingredient_name=ingredient_id,
        baseline_price=base,
        offer_price=offer,
        has_offer=offer is not None,
    )


def test_aggregate_two_required_lines():
    res = aggregate("d1", [_lp("a", 1.00, 0.80), _lp("b", 2.00)])
    assert res.base_price == pytest.approx(3.00)
    assert res.offer_price == pytest.approx(2.80)
    assert res.savings == pytest.approx(0.20)
    assert res.savings_percent == pytest.approx(6.6667, rel=1e-3)
    assert res.available_offers_count == 1


def test_aggregate_savings_floor_and_zero_base():
    # offer pricier than baseline: savings floored at zero
    res = aggregate("d1", [_lp("a", 1.00, 1.40)])
    assert res.savings == 0.0
    assert res.savings_percent == 0.0

    # offer but no baseline: base 0, percent stays 0
    res = aggregate("d1", [_lp("a", None, 0.50)])
    assert res.base_price == 0.0
    assert res.offer_price == pytest.approx(0.50)
    assert res.savings_percent == 0.0

    empty = aggregate("d1", [])
    assert (empty.base_price, empty.offer_price, empty.available_offers_count) == (0.0, 0.0, 0)


def test_price_dish_with_postal_code(pricing):
    res = pricing.price_dish("pasta-pomodoro", "10115")
    assert res.base_price == pytest.approx(3.80)
    assert res.offer_price == pytest.approx(3.25)
    assert res.savings == pytest.approx(0.55)
    assert res.savings_percent == pytest.approx(100 * 0.55 / 3.80)
    assert res.available_offers_count == 2


def test_price_dish_without_postal_code_has_no_offers(pricing):
    res = pricing.price_dish("pasta-pomodoro")
    assert res.base_price == pytest.approx(3.80)
    assert res.offer_price == pytest.approx(3.80)
    assert res.savings == 0.0
    assert res.available_offers_count == 0
    assert pricing.price_dish("pasta-pomodoro", "   ") == res


def test_unknown_postal_code_is_rejected(pricing):
    with pytest.raises(UnknownPostalCodeError):
        pricing.price_dish("pasta-pomodoro", "99999")
    with pytest.raises(UnknownPostalCodeError):
        pricing.price_dish_ingredients("pasta-pomodoro", "99999")


def test_price_dish_is_idempotent(pricing):
    assert pricing.price_dish("pasta-pomodoro", "10115") == pricing.price_dish("pasta-pomodoro", "10115")


def test_breakdown_sums_to_dish_totals(pricing):
    lines = pricing.price_dish_ingredients("pasta-pomodoro", "10115")
    res = pricing.price_dish("pasta-pomodoro", "10115")
    assert sum(lp.effective_price for lp in lines) == pytest.approx(res.offer_price)
    assert sum(lp.baseline_price or 0 for lp in lines) == pytest.approx(res.base_price)

    by_id = {lp.line.ingredient_id: lp for lp in lines}
    assert by_id["tomato"].offer.id == 1
    assert [a.is_cheapest for a in by_id["tomato"].offers] == [True, False]
    assert by_id["basil"].has_offer is False and len(by_id["basil"].offers) == 1
    assert by_id["salt"].effective_price == 0.0


def test_injected_day_controls_validity(pricing):
    later = TODAY.replace(day=TODAY.day + 10)
    res = pricing.price_dish("pasta-pomodoro", "10115", today=later)
    assert res.available_offers_count == 0

    shifted = DishPricingService(pricing.repo, clock=lambda: later)
    assert shifted.price_dish("pasta-pomodoro", "10115") == res


def test_missing_ingredient_is_not_found(store, pricing):
    store.add_recipe_line(RecipeLine("salad", "ghost", 1, "Stk"))
    with pytest.raises(NotFoundError):
        pricing.price_dish("salad")


def test_dish_without_recipe_is_not_found(pricing):
    with pytest.raises(NotFoundError):
        pricing.price_dish("does-not-exist", "10115")
    with pytest.raises(NotFoundError):
        pricing.price_dish_ingredients("does-not-exist")
