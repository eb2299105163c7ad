# mealdeal/src/infrastructure/mongo_repositories.py
from __future__ import annotations
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional
import logging
from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError
from src.core.config import Collections
from src.domain.entities import Chain, Dish, Ingredient, Offer, RecipeLine, offer_hash
from src.domain.errors import StorageUnavailableError

log = logging.getLogger("infra.mongo_repo")

def _as_str_id(v: Any) -> str:
    return str(v)

def _as_date(v: Any) -> date:
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    return date.fromisoformat(str(v).strip()[:10])

def _opt_float(v: Any) -> float | None:
    if v is None or v == "":
        return None
    return float(str(v).replace(",", "."))

@contextmanager
def _guard(what: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as e:
        log.error("Mongo call failed (%s): %s", what, e)
        raise StorageUnavailableError(f"Reference data temporarily unavailable ({what})") from e


class MongoReferenceRepository:
    """
    Read-only pricing queries backed by MongoDB.
    Dates are stored as ISO strings (YYYY-MM-DD) so range queries compare lexically.
    """
    def __init__(self, db: Database, cols: Collections = Collections()) -> None:
        self._ingredients = db[cols.INGREDIENTS]
        self._lines = db[cols.DISH_INGREDIENTS]
        self._offers = db[cols.OFFERS]
        self._regions = db[cols.REGIONS]
        self._postal = db[cols.POSTAL_CODES]

    def _parse_ingredient(self, doc: Dict[str, Any]) -> Ingredient:
        try:
            return Ingredient(
                id=_as_str_id(doc.get("ingredient_id") or doc.get("_id")),
                name=(doc.get("name_canonical") or "").strip(),
                default_unit=doc.get("unit_default"),
                baseline_price_per_unit=_opt_float(doc.get("price_baseline_per_unit")),
                allergen_tags=tuple(doc.get("allergen_tags") or ()),
                notes=doc.get("notes"),
            )
        except Exception as e:
            log.exception("Invalid ingredient document: %s", doc)
            raise ValueError(f"Invalid ingredient document: {e}") from e

    def _parse_line(self, doc: Dict[str, Any]) -> RecipeLine:
        try:
            return RecipeLine(
                dish_id=_as_str_id(doc.get("dish_id")),
                ingredient_id=_as_str_id(doc.get("ingredient_id")),
                qty=float(str(doc.get("qty")).replace(",", ".")),
                unit=str(doc.get("unit") or "").strip(),
                optional=bool(doc.get("optional", False)),
                role=doc.get("role"),
            )
        except Exception as e:
            log.exception("Invalid dish_ingredient document: %s", doc)
            raise ValueError(f"Invalid dish_ingredient document: {e}") from e

    def _parse_offer(self, doc: Dict[str, Any]) -> Offer:
        try:
            return Offer(
                id=int(doc.get("offer_id")),
                region_id=int(doc.get("region_id")),
                ingredient_id=_as_str_id(doc.get("ingredient_id")),
                price_total=float(doc.get("price_total")),
                pack_size=float(doc.get("pack_size")),
                base_unit=str(doc.get("unit_base") or "").strip(),
                valid_from=_as_date(doc.get("valid_from")),
                valid_to=_as_date(doc.get("valid_to")),
                source=doc.get("source"),
                source_ref=doc.get("source_ref_id"),
            )
        except Exception as e:
            log.exception("Invalid offer document: %s", doc)
            raise ValueError(f"Invalid offer document: {e}") from e

    def get_ingredient(self, ingredient_id: str) -> Ingredient | None:
        with _guard("ingredient"):
            doc = self._ingredients.find_one({"ingredient_id": ingredient_id})
        return self._parse_ingredient(doc) if doc else None

    def get_recipe_lines(self, dish_id: str) -> List[RecipeLine]:
        with _guard("dish_ingredients"):
            docs = list(self._lines.find({"dish_id": dish_id}).sort("ingredient_id", ASCENDING))
        return [self._parse_line(d) for d in docs]

    def find_offers(self, ingredient_id: str, region_ids: Iterable[int], as_of: date) -> List[Offer]:
        scope = [int(r) for r in region_ids]
        if not scope:
            return []
        day = as_of.isoformat()
        with _guard("offers"):
            docs = list(self._offers.find({
                "ingredient_id": ingredient_id,
                "region_id": {"$in": scope},
                "valid_from": {"$lte": day},
                "valid_to": {"$gte": day},
            }))
        return [self._parse_offer(d) for d in docs]

    def regions_for_postal_code(self, postal_code: str) -> List[int]:
        with _guard("postal_codes"):
            docs = list(self._postal.find({"plz": postal_code}, {"region_id": 1}))
        return sorted({int(d["region_id"]) for d in docs})

    def regions_for_chain(self, chain_id: int) -> List[int]:
        with _guard("ad_regions"):
            docs = list(self._regions.find({"chain_id": int(chain_id)}, {"region_id": 1}))
        return sorted({int(d["region_id"]) for d in docs})

    def upsert_offer(self, offer: Offer) -> bool:
        """Insert unless an offer with the same dedup hash exists. Returns True on insert."""
        h = offer_hash(offer)
        doc = {
            "offer_id": offer.id,
            "region_id": offer.region_id,
            "ingredient_id": offer.ingredient_id,
            "price_total": offer.price_total,
            "pack_size": offer.pack_size,
            "unit_base": offer.base_unit,
            "valid_from": offer.valid_from.isoformat(),
            "valid_to": offer.valid_to.isoformat(),
            "source": offer.source,
            "source_ref_id": offer.source_ref,
            "offer_hash": h,
        }
        with _guard("offers upsert"):
            res = self._offers.update_one({"offer_hash": h}, {"$setOnInsert": doc}, upsert=True)
        return res.upserted_id is not None


class MongoDishRepository:

    def __init__(self, db: Database, cols: Collections = Collections()) -> None:
        self._dishes = db[cols.DISHES]
        self._chains = db[cols.CHAINS]
        self._categories = db[cols.CATEGORIES]

    def _parse_dish(self, doc: Dict[str, Any]) -> Dish:
        try:
            return Dish(
                id=_as_str_id(doc.get("dish_id") or doc.get("_id")),
                name=(doc.get("name") or "").strip(),
                category=(doc.get("category") or "").strip(),
                is_quick=bool(doc.get("is_quick", False)),
                is_meal_prep=bool(doc.get("is_meal_prep", False)),
                cuisine=doc.get("cuisine"),
                season=doc.get("season"),
                notes=doc.get("notes"),
            )
        except Exception as e:
            log.exception("Invalid dish document: %s", doc)
            raise ValueError(f"Invalid dish document: {e}") from e

    def by_id(self, dish_id: str) -> Dish | None:
        with _guard("dish"):
            doc = self._dishes.find_one({"dish_id": str(dish_id)})
        return self._parse_dish(doc) if doc else None

    def list(
        self,
        category: Optional[str] = None,
        is_quick: Optional[bool] = None,
        is_meal_prep: Optional[bool] = None,
        limit: int = 50,
    ) -> List[Dish]:
        q: Dict[str, Any] = {}
        if category is not None:
            q["category"] = category
        if is_quick is not None:
            q["is_quick"] = is_quick
        if is_meal_prep is not None:
            q["is_meal_prep"] = is_meal_prep
        with _guard("dishes"):
            docs = list(self._dishes.find(q).sort("dish_id", ASCENDING).limit(int(limit)))
        return [self._parse_dish(d) for d in docs]

    def categories(self) -> List[str]:
        with _guard("categories"):
            docs = list(self._categories.find({}, {"category": 1}))
        return [str(d["category"]) for d in docs if d.get("category")]

    def chains(self) -> List[Chain]:
        with _guard("chains"):
            docs = list(self._chains.find({}).sort("chain_name", ASCENDING))
        return [Chain(id=int(d["chain_id"]), name=str(d["chain_name"])) for d in docs]

    def chain_by_name(self, name: str) -> Chain | None:
        with _guard("chain"):
            doc = self._chains.find_one({"chain_name": name})
        return Chain(id=int(doc["chain_id"]), name=str(doc["chain_name"])) if doc else None


class MongoFavoriteRepository:

    def __init__(self, db: Database, cols: Collections = Collections()) -> None:
        self._col = db[cols.FAVORITES]

    def list_for_user(self, user_id: str) -> List[str]:
        with _guard("favorites"):
            docs = list(self._col.find({"user_id": user_id}, {"dish_id": 1}))
        return [str(d["dish_id"]) for d in docs]

    def add(self, user_id: str, dish_id: str) -> None:
        with _guard("favorites add"):
            self._col.update_one(
                {"user_id": user_id, "dish_id": dish_id},
                {"$setOnInsert": {"user_id": user_id, "dish_id": dish_id}},
                upsert=True,
            )

    def remove(self, user_id: str, dish_id: str) -> None:
        with _guard("favorites remove"):
            self._col.delete_one({"user_id": user_id, "dish_id": dish_id})

    def contains(self, user_id: str, dish_id: str) -> bool:
        with _guard("favorites check"):
            return self._col.find_one({"user_id": user_id, "dish_id": dish_id}) is not None
