"""Pricing of a single recipe line.

Baseline price:
    recipe qty converted into the ingredient's default unit, times the
    ingredient's baseline price per unit. When the units cannot be converted
    the raw recipe qty is used instead.

Offer price:
    recipe qty converted into the offer's base unit, as a fraction of the
    pack, times the pack price. No fallback: an unconvertible unit means the
    line has no offer price.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from src.application.units import convert
from src.domain.entities import AnnotatedOffer, Ingredient, LinePrice, Offer, RecipeLine

log = logging.getLogger("app.line_pricer")


def baseline_price(line: RecipeLine, ingredient: Ingredient) -> Optional[float]:
    per_unit = ingredient.baseline_price_per_unit
    if per_unit is None:
        return None
    qty = float(line.qty)
    if ingredient.default_unit:
        converted = convert(qty, line.unit, ingredient.default_unit)
        if converted is not None:
            return converted * float(per_unit)
        log.warning(
            "Baseline for %s/%s: cannot convert %s -> %s, using raw qty",
            line.dish_id, line.ingredient_id, line.unit, ingredient.default_unit,
        )
    return qty * float(per_unit)


def offer_price(line: RecipeLine, offer: Optional[Offer]) -> Optional[float]:
    if offer is None:
        return None
    converted = convert(float(line.qty), line.unit, offer.base_unit)
    if converted is None:
        log.warning(
            "Offer #%s for %s/%s: cannot convert %s -> %s, ignoring offer",
            offer.id, line.dish_id, line.ingredient_id, line.unit, offer.base_unit,
        )
        return None
    return (converted / offer.pack_size) * offer.price_total


def price_line(
    line: RecipeLine,
    ingredient: Ingredient,
    best_offer: Optional[Offer] = None,
    offers: Sequence[AnnotatedOffer] = (),
) -> LinePrice:
    base = baseline_price(line, ingredient)
    off = offer_price(line, best_offer)
    return LinePrice(
        line=line,
        ingredient_name=ingredient.name,
        baseline_price=base,
        offer_price=off,
        has_offer=off is not None,
        offer=best_offer,
        offers=tuple(offers),
    )
