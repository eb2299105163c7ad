# =========================
# FILE: mealdeal/src/api/schemas.py
# =========================
from __future__ import annotations

from typing import List, Optional
from pydantic import BaseModel, Field


class DishOut(BaseModel):
    id: str
    name: str
    category: str
    is_quick: bool = False
    is_meal_prep: bool = False
    cuisine: Optional[str] = None
    season: Optional[str] = None
    notes: Optional[str] = None


class DishListItem(DishOut):
    current_price: float = 0.0
    base_price: float = 0.0
    savings: float = 0.0
    savings_percent: float = 0.0
    available_offers: int = 0
    is_favorite: bool = False


class DishPricingOut(BaseModel):
    dish_id: str
    base_price: float = Field(ge=0.0)
    offer_price: float = Field(ge=0.0)
    savings: float = Field(ge=0.0)
    savings_percent: float = Field(ge=0.0, le=100.0)
    available_offers_count: int = Field(ge=0)


class OfferOut(BaseModel):
    offer_id: int
    region_id: int
    price_total: float
    pack_size: float
    unit_base: str
    unit_price: float
    valid_from: str
    valid_to: str
    source: Optional[str] = None
    is_cheapest: bool = False


class IngredientLineOut(BaseModel):
    ingredient_id: str
    ingredient_name: str
    qty: float
    unit: str
    optional: bool = False
    role: Optional[str] = None
    baseline_price: Optional[float] = None
    offer_price: Optional[float] = None
    line_price: float = 0.0
    has_offer: bool = False
    offers: List[OfferOut] = Field(default_factory=list)


class DishDetailOut(BaseModel):
    dish: DishOut
    pricing: DishPricingOut
    required_ingredients: List[IngredientLineOut]
    optional_ingredients: List[IngredientLineOut]
    is_favorite: bool = False


class ChainOut(BaseModel):
    id: int
    name: str


class ChainAvailabilityOut(BaseModel):
    dish_id: str
    chain_id: int
    available: bool


class FavoritesOut(BaseModel):
    user_id: str
    dish_ids: List[str]
