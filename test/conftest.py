from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.application.dish_pricing import DishPricingService
from src.domain.entities import Chain, Dish, Ingredient, Offer, RecipeLine, Region
from src.infrastructure.memory_store import InMemoryFavoriteStore, InMemoryReferenceStore

TODAY = date(2025, 3, 10)


def make_offer(offer_id, region_id, ingredient_id, price_total, pack_size, unit, days_back=3, days_ahead=3, **kw):
    return Offer(
        id=offer_id,
        region_id=region_id,
        ingredient_id=ingredient_id,
        price_total=price_total,
        pack_size=pack_size,
        base_unit=unit,
        valid_from=TODAY - timedelta(days=days_back),
        valid_to=TODAY + timedelta(days=days_ahead),
        **kw,
    )


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def store() -> InMemoryReferenceStore:
    """
    Chains: REWE(1) regions 10 [10115], 11 [20095]; ALDI(2) region 20 [10115]; LIDL(3) region 30.

    pasta-pomodoro (base 3.80):
      tomato 500 g    base 1.00  offer #1 (3.00 / 2 kg) -> 0.75
      pasta 500 g     base 0.80  offer #3 (ALDI, 1.00 / 1 kg) -> 0.50
      basil 1 Bund    base 1.00  optional, offer #6 in grams is unconvertible
      parmesan 50 g   base 1.00  optional, offers only in regions 11 and 30
      salt 5 g        no baseline
    salad (base 1.50):
      tomato 250 g    base 0.50  offer -> 0.375
      basil 1 Bund    base 1.00
    """
    s = InMemoryReferenceStore()
    s.add_chain(Chain(id=1, name="REWE"))
    s.add_chain(Chain(id=2, name="ALDI"))
    s.add_chain(Chain(id=3, name="LIDL"))
    s.add_region(Region(id=10, chain_id=1), ["10115"])
    s.add_region(Region(id=11, chain_id=1), ["20095"])
    s.add_region(Region(id=20, chain_id=2), ["10115"])
    s.add_region(Region(id=30, chain_id=3))

    s.add_ingredient(Ingredient(id="tomato", name="Tomate", default_unit="kg", baseline_price_per_unit=2.00))
    s.add_ingredient(Ingredient(id="pasta", name="Spaghetti", default_unit="kg", baseline_price_per_unit=1.60))
    s.add_ingredient(Ingredient(id="basil", name="Basilikum", default_unit="Bund", baseline_price_per_unit=1.00))
    s.add_ingredient(Ingredient(id="parmesan", name="Parmesan", default_unit="kg", baseline_price_per_unit=20.00))
    s.add_ingredient(Ingredient(id="salt", name="Salz", default_unit="g"))

    s.add_dish(
        Dish(id="pasta-pomodoro", name="Pasta Pomodoro", category="Pasta", is_quick=True),
        [
            RecipeLine("pasta-pomodoro", "tomato", 500, "g"),
            RecipeLine("pasta-pomodoro", "pasta", 500, "g", role="base"),
            RecipeLine("pasta-pomodoro", "basil", 1, "Bund", optional=True),
            RecipeLine("pasta-pomodoro", "parmesan", 50, "g", optional=True),
            RecipeLine("pasta-pomodoro", "salt", 5, "g"),
        ],
    )
    s.add_dish(
        Dish(id="salad", name="Tomatensalat", category="Salad", is_meal_prep=True),
        [
            RecipeLine("salad", "tomato", 250, "g"),
            RecipeLine("salad", "basil", 1, "bund"),
        ],
    )

    s.add_offer(make_offer(1, 10, "tomato", 3.00, 2, "kg"))
    s.add_offer(make_offer(2, 10, "tomato", 2.40, 1, "kg"))
    s.add_offer(make_offer(3, 20, "pasta", 1.00, 1, "kg"))
    s.add_offer(make_offer(4, 10, "pasta", 0.10, 1, "kg", days_back=10, days_ahead=-1))
    s.add_offer(make_offer(5, 11, "parmesan", 1.50, 100, "g"))
    s.add_offer(make_offer(6, 10, "basil", 0.50, 20, "g"))
    s.add_offer(make_offer(7, 30, "parmesan", 1.20, 100, "g"))
    return s


@pytest.fixture
def favorites() -> InMemoryFavoriteStore:
    return InMemoryFavoriteStore()


@pytest.fixture
def pricing(store) -> DishPricingService:
    return DishPricingService(store, clock=lambda: TODAY)
