# mealdeal/src/infrastructure/memory_store.py
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

from src.domain.entities import Chain, Dish, Ingredient, Offer, RecipeLine, Region, offer_hash

log = logging.getLogger("infra.memory_store")


class InMemoryReferenceStore:
    """
    Dict-backed implementation of ReferenceDataRepo and DishReadRepo.
    Used for local runs and tests; offers are deduplicated by offer_hash().
    """

    def __init__(self) -> None:
        self._ingredients: Dict[str, Ingredient] = {}
        self._dishes: Dict[str, Dish] = {}
        self._lines: Dict[Tuple[str, str], RecipeLine] = {}
        self._offers: Dict[str, Offer] = {}
        self._regions: Dict[int, Region] = {}
        self._chains: Dict[int, Chain] = {}
        self._postal: Dict[str, Set[int]] = {}
        self._categories: List[str] = []

    # ---- writes (seeding) ----
    def add_ingredient(self, ing: Ingredient) -> None:
        self._ingredients[ing.id] = ing

    def add_dish(self, dish: Dish, lines: Iterable[RecipeLine] = ()) -> None:
        self._dishes[dish.id] = dish
        if dish.category not in self._categories:
            self._categories.append(dish.category)
        for ln in lines:
            self.add_recipe_line(ln)

    def add_recipe_line(self, line: RecipeLine) -> None:
        key = (line.dish_id, line.ingredient_id)
        if key in self._lines:
            raise ValueError(f"Duplicate recipe line: dish={line.dish_id} ingredient={line.ingredient_id}")
        self._lines[key] = line

    def add_offer(self, offer: Offer) -> bool:
        """Returns False when an identical offer is already stored."""
        h = offer_hash(offer)
        if h in self._offers:
            log.debug("Skipping duplicate offer #%s", offer.id)
            return False
        self._offers[h] = offer
        return True

    def add_chain(self, chain: Chain) -> None:
        self._chains[chain.id] = chain

    def add_region(self, region: Region, postal_codes: Iterable[str] = ()) -> None:
        self._regions[region.id] = region
        for pc in postal_codes:
            self._postal.setdefault(pc, set()).add(region.id)

    # ---- ReferenceDataRepo ----
    def get_ingredient(self, ingredient_id: str) -> Optional[Ingredient]:
        return self._ingredients.get(ingredient_id)

    def get_recipe_lines(self, dish_id: str) -> List[RecipeLine]:
        return [ln for (d, _), ln in self._lines.items() if d == dish_id]

    def find_offers(self, ingredient_id: str, region_ids: Iterable[int], as_of: date) -> List[Offer]:
        scope = set(region_ids)
        return [
            o for o in self._offers.values()
            if o.ingredient_id == ingredient_id and o.region_id in scope and o.is_active(as_of)
        ]

    def regions_for_postal_code(self, postal_code: str) -> List[int]:
        return sorted(self._postal.get(postal_code, set()))

    def regions_for_chain(self, chain_id: int) -> List[int]:
        return sorted(r.id for r in self._regions.values() if r.chain_id == chain_id)

    # ---- DishReadRepo ----
    def by_id(self, dish_id: str) -> Optional[Dish]:
        return self._dishes.get(str(dish_id))

    def list(
        self,
        category: Optional[str] = None,
        is_quick: Optional[bool] = None,
        is_meal_prep: Optional[bool] = None,
        limit: int = 50,
    ) -> List[Dish]:
        out: List[Dish] = []
        for d in self._dishes.values():
            if category is not None and d.category != category:
                continue
            if is_quick is not None and d.is_quick != is_quick:
                continue
            if is_meal_prep is not None and d.is_meal_prep != is_meal_prep:
                continue
            out.append(d)
            if len(out) >= limit:
                break
        return out

    def categories(self) -> List[str]:
        return list(self._categories)

    def chains(self) -> List[Chain]:
        return sorted(self._chains.values(), key=lambda c: c.name)

    def chain_by_name(self, name: str) -> Optional[Chain]:
        for c in self._chains.values():
            if c.name == name:
                return c
        return None


class InMemoryFavoriteStore:
    def __init__(self) -> None:
        self._data: Dict[str, List[str]] = {}

    def list_for_user(self, user_id: str) -> List[str]:
        return list(self._data.get(user_id, []))

    def add(self, user_id: str, dish_id: str) -> None:
        favs = self._data.setdefault(user_id, [])
        if dish_id not in favs:
            favs.append(dish_id)

    def remove(self, user_id: str, dish_id: str) -> None:
        favs = self._data.get(user_id, [])
        if dish_id in favs:
            favs.remove(dish_id)

    def contains(self, user_id: str, dish_id: str) -> bool:
        return dish_id in self._data.get(user_id, [])
