# mealdeal/src/application/offer_selector.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import AbstractSet, Iterable, List, Optional

from src.domain.entities import AnnotatedOffer, Offer
from src.domain.repositories import ReferenceDataRepo

log = logging.getLogger("app.offer_selector")


def _rank_key(o: Offer):
    # cheapest per base unit first, offer id keeps ties deterministic
    return (o.unit_price, o.id)


def active_offers(
    offers: Iterable[Offer],
    ingredient_id: str,
    region_ids: AbstractSet[int],
    as_of: date,
) -> List[Offer]:
    if not region_ids:
        return []
    out = [
        o for o in offers
        if o.ingredient_id == ingredient_id and o.region_id in region_ids and o.is_active(as_of)
    ]
    out.sort(key=_rank_key)
    return out


def cheapest(offers: Iterable[Offer]) -> Optional[Offer]:
    ranked = sorted(offers, key=_rank_key)
    return ranked[0] if ranked else None


def annotate(offers: Iterable[Offer]) -> List[AnnotatedOffer]:
    """All offers ordered by unit price, flagging every one that hits the minimum."""
    ranked = sorted(offers, key=_rank_key)
    if not ranked:
        return []
    floor = ranked[0].unit_price
    return [
        AnnotatedOffer(offer=o, is_cheapest=math.isclose(o.unit_price, floor, rel_tol=1e-9, abs_tol=1e-12))
        for o in ranked
    ]


@dataclass(frozen=True)
class OfferSelector:
    repo: ReferenceDataRepo

    def candidates(self, ingredient_id: str, region_ids: AbstractSet[int], as_of: date) -> List[Offer]:
        if not region_ids:
            return []
        fetched = self.repo.find_offers(ingredient_id, sorted(region_ids), as_of)
        # the store may over-fetch; the window and scope are enforced here
        return active_offers(fetched, ingredient_id, region_ids, as_of)

    def best(self, ingredient_id: str, region_ids: AbstractSet[int], as_of: date) -> Optional[Offer]:
        best = cheapest(self.candidates(ingredient_id, region_ids, as_of))
        if best is not None:
            log.debug("Best offer for %s: #%s at %.4f/%s", ingredient_id, best.id, best.unit_price, best.base_unit)
        return best

    def all_annotated(self, ingredient_id: str, region_ids: AbstractSet[int], as_of: date) -> List[AnnotatedOffer]:
        return annotate(self.candidates(ingredient_id, region_ids, as_of))
