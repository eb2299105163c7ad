# mealdeal/src/domain/repositories.py
from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Protocol

from src.domain.entities import Chain, Dish, Ingredient, Offer, RecipeLine


class ReferenceDataRepo(Protocol):
    """Read-only queries the pricing core needs."""

    def get_ingredient(self, ingredient_id: str) -> Optional[Ingredient]: ...

    def get_recipe_lines(self, dish_id: str) -> List[RecipeLine]: ...

    def find_offers(self, ingredient_id: str, region_ids: Iterable[int], as_of: date) -> List[Offer]: ...

    def regions_for_postal_code(self, postal_code: str) -> List[int]: ...

    def regions_for_chain(self, chain_id: int) -> List[int]: ...


class DishReadRepo(Protocol):
    def by_id(self, dish_id: str) -> Optional[Dish]: ...

    def list(
        self,
        category: Optional[str] = None,
        is_quick: Optional[bool] = None,
        is_meal_prep: Optional[bool] = None,
        limit: int = 50,
    ) -> List[Dish]: ...

    def categories(self) -> List[str]: ...

    def chains(self) -> List[Chain]: ...

    def chain_by_name(self, name: str) -> Optional[Chain]: ...


class FavoriteRepo(Protocol):
    def list_for_user(self, user_id: str) -> List[str]: ...

    def add(self, user_id: str, dish_id: str) -> None: ...

    def remove(self, user_id: str, dish_id: str) -> None: ...

    def contains(self, user_id: str, dish_id: str) -> bool: ...
