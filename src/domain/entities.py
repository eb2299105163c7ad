# mealdeal/src/domain/entities.py
from __future__ import annotations
import hashlib
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Any, Dict, FrozenSet, Optional, Tuple

@dataclass(frozen=True)
class Ingredient:
    id: str
    name: str
    default_unit: str | None = None
    baseline_price_per_unit: float | None = None
    allergen_tags: Tuple[str, ...] = ()
    notes: str | None = None

@dataclass(frozen=True)
class Dish:
    id: str
    name: str
    category: str
    is_quick: bool = False
    is_meal_prep: bool = False
    cuisine: str | None = None
    season: str | None = None
    notes: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

@dataclass(frozen=True)
class RecipeLine:
    dish_id: str
    ingredient_id: str
    qty: float
    unit: str
    optional: bool = False
    role: str | None = None

@dataclass(frozen=True)
class Offer:
    id: int
    region_id: int
    ingredient_id: str
    price_total: float
    pack_size: float
    base_unit: str
    valid_from: date
    valid_to: date
    source: str | None = None
    source_ref: str | None = None

    def __post_init__(self) -> None:
        if self.pack_size <= 0:
            raise ValueError(f"Offer {self.id}: pack_size must be > 0, got {self.pack_size}")
        if self.price_total < 0:
            raise ValueError(f"Offer {self.id}: price_total must be >= 0, got {self.price_total}")

    @property
    def unit_price(self) -> float:
        """Effective price per base unit, used to compare competing offers."""
        return self.price_total / self.pack_size

    def is_active(self, on: date) -> bool:
        # validity window is inclusive on both ends
        return self.valid_from <= on <= self.valid_to

@dataclass(frozen=True)
class Region:
    id: int
    chain_id: int

@dataclass(frozen=True)
class Chain:
    id: int
    name: str

@dataclass(frozen=True)
class RegionResolution:
    """Outcome of mapping an optional postal code to pricing regions."""
    postal_code: str | None
    region_ids: FrozenSet[int] = frozenset()

    @property
    def supplied(self) -> bool:
        return self.postal_code is not None

    @property
    def unknown(self) -> bool:
        return self.supplied and not self.region_ids

@dataclass(frozen=True)
class AnnotatedOffer:
    offer: Offer
    is_cheapest: bool

    @property
    def unit_price(self) -> float:
        return self.offer.unit_price

@dataclass(frozen=True)
class LinePrice:
    line: RecipeLine
    ingredient_name: str
    baseline_price: float | None
    offer_price: float | None
    has_offer: bool
    offer: Optional[Offer] = None
    offers: Tuple[AnnotatedOffer, ...] = field(default_factory=tuple)

    @property
    def effective_price(self) -> float:
        if self.offer_price is not None:
            return self.offer_price
        if self.baseline_price is not None:
            return self.baseline_price
        return 0.0

@dataclass(frozen=True)
class PricingResult:
    dish_id: str
    base_price: float
    offer_price: float
    savings: float
    savings_percent: float
    available_offers_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def offer_hash(offer: Offer) -> str:
    """Stable dedup key for an offer; ids and source label are not part of it."""
    key = "|".join(
        str(v)
        for v in (
            offer.region_id,
            offer.ingredient_id,
            f"{offer.price_total:.4f}",
            f"{offer.pack_size:.4f}",
            offer.valid_from.isoformat(),
            offer.valid_to.isoformat(),
            offer.source_ref or "",
        )
    )
    return hashlib.sha256(key.encode("utf-8")).hexdigest()
