# mealdeal/src/application/dish_pricing.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import AbstractSet, Callable, Iterable, List, Optional

from src.application.line_pricer import price_line
from src.application.offer_selector import OfferSelector
from src.application.region_resolver import RegionResolver
from src.domain.entities import LinePrice, PricingResult, RecipeLine
from src.domain.errors import NotFoundError
from src.domain.repositories import ReferenceDataRepo

log = logging.getLogger("app.dish_pricing")


def aggregate(dish_id: str, lines: Iterable[LinePrice]) -> PricingResult:
    """
    Reduce line prices into the dish summary.
    Required and optional lines both count towards the totals.
    """
    base_total = 0.0
    offer_total = 0.0
    offers_count = 0
    for lp in lines:
        base_total += lp.baseline_price or 0.0
        offer_total += lp.offer_price if lp.has_offer else (lp.baseline_price or 0.0)
        if lp.has_offer:
            offers_count += 1

    savings = max(0.0, base_total - offer_total)
    savings_percent = 0.0 if base_total == 0 else 100.0 * savings / base_total
    return PricingResult(
        dish_id=dish_id,
        base_price=base_total,
        offer_price=offer_total,
        savings=savings,
        savings_percent=savings_percent,
        available_offers_count=offers_count,
    )


@dataclass(frozen=True)
class DishPricingService:
    """Single entry point for dish prices, ingredient breakdowns and chain availability."""
    repo: ReferenceDataRepo
    clock: Callable[[], date] = field(default=date.today)

    @property
    def regions(self) -> RegionResolver:
        return RegionResolver(self.repo)

    @property
    def offers(self) -> OfferSelector:
        return OfferSelector(self.repo)

    def _lines(self, dish_id: str) -> List[RecipeLine]:
        lines = list(self.repo.get_recipe_lines(dish_id))
        if not lines:
            raise NotFoundError("Recipe", dish_id)
        return lines

    def _price_lines(
        self,
        lines: Iterable[RecipeLine],
        region_ids: AbstractSet[int],
        today: date,
        with_offers: bool = False,
    ) -> List[LinePrice]:
        out: List[LinePrice] = []
        selector = self.offers
        for line in lines:
            ingredient = self.repo.get_ingredient(line.ingredient_id)
            if ingredient is None:
                raise NotFoundError("Ingredient", line.ingredient_id)
            if with_offers:
                annotated = selector.all_annotated(line.ingredient_id, region_ids, today)
                best = annotated[0].offer if annotated else None
            else:
                annotated = []
                best = selector.best(line.ingredient_id, region_ids, today)
            lp = price_line(line, ingredient, best, annotated)
            log.debug(
                "Line %s/%s: base=%s offer=%s has_offer=%s",
                line.dish_id, line.ingredient_id, lp.baseline_price, lp.offer_price, lp.has_offer,
            )
            out.append(lp)
        return out

    def price_dish_ingredients(
        self, dish_id: str, postal_code: Optional[str] = None, today: Optional[date] = None
    ) -> List[LinePrice]:
        day = today or self.clock()
        scope = self.regions.require(postal_code)
        return self._price_lines(self._lines(dish_id), scope.region_ids, day, with_offers=True)

    def price_dish(
        self, dish_id: str, postal_code: Optional[str] = None, today: Optional[date] = None
    ) -> PricingResult:
        day = today or self.clock()
        scope = self.regions.require(postal_code)
        lines = self._price_lines(self._lines(dish_id), scope.region_ids, day)
        result = aggregate(dish_id, lines)
        if result.base_price == 0 and result.offer_price == 0:
            log.warning("Dish %s has zero pricing. PLZ: %s", dish_id, scope.postal_code or "none")
        return result

    def is_dish_available_for_chain(
        self,
        dish_id: str,
        chain_id: int,
        postal_code: Optional[str] = None,
        today: Optional[date] = None,
    ) -> bool:
        day = today or self.clock()
        region_ids = self.regions.for_chain(chain_id, postal_code)
        if not region_ids:
            return False
        selector = self.offers
        # a dish without recipe lines is simply not available
        for line in self.repo.get_recipe_lines(dish_id):
            if line.optional:
                continue
            if selector.candidates(line.ingredient_id, region_ids, day):
                return True
        return False
