import anyio
import pytest

from src.application.usecases import DishFilters, GetDishDetail, ListDishes, ManageFavorites
from src.domain.errors import NotFoundError, UnknownPostalCodeError
from conftest import TODAY


def _list(store, pricing, favorites, **kw):
    uc = ListDishes(store, pricing, favorites)
    return anyio.run(uc, DishFilters(**kw), TODAY)


def test_listing_annotates_prices(store, pricing, favorites):
    rows = _list(store, pricing, favorites, postal_code="10115", sort="price")
    assert [r["id"] for r in rows] == ["salad", "pasta-pomodoro"]
    salad = rows[0]
    assert salad["current_price"] == pytest.approx(1.375)
    assert salad["base_price"] == pytest.approx(1.50)
    assert salad["available_offers"] == 1
    assert salad["is_favorite"] is False


def test_listing_filters(store, pricing, favorites):
    assert [r["id"] for r in _list(store, pricing, favorites, max_price=2.0)] == ["salad"]
    assert [r["id"] for r in _list(store, pricing, favorites, category="Pasta")] == ["pasta-pomodoro"]
    assert len(_list(store, pricing, favorites, category="all")) == 2
    assert [r["id"] for r in _list(store, pricing, favorites, is_meal_prep=True)] == ["salad"]
    assert [r["id"] for r in _list(store, pricing, favorites, chain="ALDI")] == ["pasta-pomodoro"]
    # unknown chain name leaves the list untouched
    assert len(_list(store, pricing, favorites, chain="Netto")) == 2


def test_listing_sorts(store, pricing, favorites):
    by_name = _list(store, pricing, favorites, sort="name")
    assert [r["name"] for r in by_name] == ["Pasta Pomodoro", "Tomatensalat"]
    by_savings = _list(store, pricing, favorites, postal_code="10115", sort="savings")
    assert [r["id"] for r in by_savings] == ["pasta-pomodoro", "salad"]


def test_listing_rejects_unknown_postal_code(store, pricing, favorites):
    with pytest.raises(UnknownPostalCodeError):
        _list(store, pricing, favorites, postal_code="99999")


def test_listing_marks_favorites(store, pricing, favorites):
    favorites.add("u1", "salad")
    rows = {r["id"]: r for r in _list(store, pricing, favorites, user_id="u1")}
    assert rows["salad"]["is_favorite"] is True
    assert rows["pasta-pomodoro"]["is_favorite"] is False


def test_dish_detail_splits_required_and_optional(store, pricing, favorites):
    detail = GetDishDetail(store, pricing, favorites)("pasta-pomodoro", "10115", today=TODAY)
    assert [d["ingredient_id"] for d in detail["optional_ingredients"]] == ["basil", "parmesan"]
    assert len(detail["required_ingredients"]) == 3
    total = sum(d["line_price"] for d in detail["required_ingredients"] + detail["optional_ingredients"])
    assert total == pytest.approx(detail["pricing"]["offer_price"])
    tomato = detail["required_ingredients"][0]
    assert tomato["has_offer"] is True
    assert tomato["offers"][0]["is_cheapest"] is True
    assert tomato["offers"][0]["unit_price"] == pytest.approx(1.50)


def test_dish_detail_unknown_dish(store, pricing):
    with pytest.raises(NotFoundError):
        GetDishDetail(store, pricing)("nope")


def test_favorites_toggle(store, favorites):
    uc = ManageFavorites(store, favorites)
    assert uc.toggle("u1", "salad") is True
    assert uc.list("u1") == ["salad"]
    assert uc.toggle("u1", "salad") is False
    assert uc.list("u1") == []
    with pytest.raises(NotFoundError):
        uc.add("u1", "nope")
