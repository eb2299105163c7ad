# =========================
# FILE: mealdeal/src/application/usecases.py
# =========================
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, TypeVar

import anyio

from src.application.dish_pricing import DishPricingService
from src.core.config import DEFAULT_LIST_LIMIT
from src.domain.entities import Dish, LinePrice, PricingResult
from src.domain.errors import NotFoundError
from src.domain.repositories import DishReadRepo, FavoriteRepo

log = logging.getLogger("app.usecases")

SORT_KEYS = ("name", "price", "savings")

T = TypeVar("T")


@dataclass(frozen=True)
class DishFilters:
    category: Optional[str] = None
    chain: Optional[str] = None
    max_price: Optional[float] = None
    postal_code: Optional[str] = None
    is_quick: Optional[bool] = None
    is_meal_prep: Optional[bool] = None
    limit: int = DEFAULT_LIST_LIMIT
    sort: Optional[str] = None
    user_id: Optional[str] = None


def _listing_row(dish: Dish, pricing: PricingResult, is_favorite: bool) -> Dict[str, Any]:
    row = dish.to_dict()
    row.update(
        current_price=pricing.offer_price,
        base_price=pricing.base_price,
        savings=pricing.savings,
        savings_percent=pricing.savings_percent,
        available_offers=pricing.available_offers_count,
        is_favorite=is_favorite,
    )
    return row


def _sort_rows(rows: List[Dict[str, Any]], sort: Optional[str]) -> List[Dict[str, Any]]:
    if sort == "price":
        return sorted(rows, key=lambda r: r["current_price"])
    if sort == "savings":
        return sorted(rows, key=lambda r: -r["savings"])
    if sort == "name":
        return sorted(rows, key=lambda r: r["name"].lower())
    return rows


async def _fan_out(fn: Callable[[str], T], keys: List[str]) -> Dict[str, T]:
    """
    Run fn(key) for every key in worker threads and wait for all of them.
    The first failure is re-raised as-is once every task has finished.
    """
    results: Dict[str, T] = {}
    errors: List[BaseException] = []

    async def _run(key: str) -> None:
        try:
            results[key] = await anyio.to_thread.run_sync(fn, key)
        except Exception as e:
            errors.append(e)

    async with anyio.create_task_group() as tg:
        for k in keys:
            tg.start_soon(_run, k)

    if errors:
        raise errors[0]
    return results


def line_detail(lp: LinePrice) -> Dict[str, Any]:
    ln = lp.line
    return {
        "ingredient_id": ln.ingredient_id,
        "ingredient_name": lp.ingredient_name,
        "qty": ln.qty,
        "unit": ln.unit,
        "optional": ln.optional,
        "role": ln.role,
        "baseline_price": lp.baseline_price,
        "offer_price": lp.offer_price,
        "line_price": lp.effective_price,
        "has_offer": lp.has_offer,
        "offers": [
            {
                "offer_id": a.offer.id,
                "region_id": a.offer.region_id,
                "price_total": a.offer.price_total,
                "pack_size": a.offer.pack_size,
                "unit_base": a.offer.base_unit,
                "unit_price": a.unit_price,
                "valid_from": a.offer.valid_from.isoformat(),
                "valid_to": a.offer.valid_to.isoformat(),
                "source": a.offer.source,
                "is_cheapest": a.is_cheapest,
            }
            for a in lp.offers
        ],
    }


@dataclass(frozen=True)
class ListDishes:
    """Dish listing with pricing, favorites and the max-price / chain filters."""
    dishes: DishReadRepo
    pricing: DishPricingService
    favorites: Optional[FavoriteRepo] = None

    async def __call__(self, filters: DishFilters, today: Optional[date] = None) -> List[Dict[str, Any]]:
        day = today or self.pricing.clock()
        category = filters.category if filters.category and filters.category != "all" else None
        dishes = self.dishes.list(
            category=category,
            is_quick=filters.is_quick,
            is_meal_prep=filters.is_meal_prep,
            limit=filters.limit,
        )

        # reject a bad postal code once, before any per-dish work starts
        self.pricing.regions.require(filters.postal_code)

        priced = await _fan_out(
            lambda dish_id: self.pricing.price_dish(dish_id, filters.postal_code, day),
            [d.id for d in dishes],
        )

        favs = set(self.favorites.list_for_user(filters.user_id)) if (self.favorites and filters.user_id) else set()
        rows = [_listing_row(d, priced[d.id], d.id in favs) for d in dishes]

        if filters.max_price is not None:
            rows = [r for r in rows if r["current_price"] <= filters.max_price]

        if filters.chain and filters.chain != "all":
            chain = self.dishes.chain_by_name(filters.chain)
            if chain is None:
                log.warning("Unknown chain %r; chain filter ignored", filters.chain)
            else:
                available = await _fan_out(
                    lambda dish_id: self.pricing.is_dish_available_for_chain(
                        dish_id, chain.id, filters.postal_code, day
                    ),
                    [r["id"] for r in rows],
                )
                rows = [r for r in rows if available[r["id"]]]

        return _sort_rows(rows, filters.sort)


@dataclass(frozen=True)
class GetDishDetail:
    dishes: DishReadRepo
    pricing: DishPricingService
    favorites: Optional[FavoriteRepo] = None

    def __call__(
        self,
        dish_id: str,
        postal_code: Optional[str] = None,
        user_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        dish = self.dishes.by_id(dish_id)
        if dish is None:
            raise NotFoundError("Dish", dish_id)

        day = today or self.pricing.clock()
        lines = self.pricing.price_dish_ingredients(dish.id, postal_code, day)
        summary = self.pricing.price_dish(dish.id, postal_code, day)
        details = [line_detail(lp) for lp in lines]
        return {
            "dish": dish.to_dict(),
            "pricing": summary.to_dict(),
            "required_ingredients": [d for d in details if not d["optional"]],
            "optional_ingredients": [d for d in details if d["optional"]],
            "is_favorite": bool(self.favorites and user_id and self.favorites.contains(user_id, dish.id)),
        }


@dataclass(frozen=True)
class ManageFavorites:
    dishes: DishReadRepo
    favorites: FavoriteRepo

    def list(self, user_id: str) -> List[str]:
        return self.favorites.list_for_user(user_id)

    def add(self, user_id: str, dish_id: str) -> None:
        if self.dishes.by_id(dish_id) is None:
            raise NotFoundError("Dish", dish_id)
        self.favorites.add(user_id, dish_id)
        log.info("Favorite added: user=%s dish=%s", user_id, dish_id)

    def remove(self, user_id: str, dish_id: str) -> None:
        self.favorites.remove(user_id, dish_id)

    def toggle(self, user_id: str, dish_id: str) -> bool:
        """Returns the new favorite state."""
        if self.favorites.contains(user_id, dish_id):
            self.remove(user_id, dish_id)
            return False
        self.add(user_id, dish_id)
        return True
