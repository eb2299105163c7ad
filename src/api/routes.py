# mealdeal/src/api/routes.py
from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.api.schemas import (
    ChainAvailabilityOut,
    ChainOut,
    DishDetailOut,
    DishListItem,
    DishPricingOut,
    FavoritesOut,
    IngredientLineOut,
)
from src.application.usecases import SORT_KEYS, DishFilters, line_detail
from src.core.config import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT, POSTAL_CODE_PATTERN
from src.domain.errors import NotFoundError, StorageUnavailableError, UnknownPostalCodeError

log = logging.getLogger("api.routes")
router = APIRouter()


# -------------------------
# Dependencies via app.state
# -------------------------
def _from_state(request: Request, name: str):
    obj = getattr(request.app.state, name, None)
    if obj is None:
        raise RuntimeError(f"{name} not initialized. Check app startup wiring.")
    return obj


def get_pricing(request: Request):
    return _from_state(request, "pricing")


def get_dish_repo(request: Request):
    return _from_state(request, "dish_repo")


def get_list_dishes(request: Request):
    return _from_state(request, "list_dishes_uc")


def get_dish_detail(request: Request):
    return _from_state(request, "dish_detail_uc")


def get_favorites(request: Request):
    return _from_state(request, "favorites_uc")


def _to_http(e: Exception, what: str) -> HTTPException:
    if isinstance(e, UnknownPostalCodeError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, StorageUnavailableError):
        return HTTPException(status_code=503, detail=str(e))
    log.exception("Processing %s error", what)
    return HTTPException(status_code=500, detail=str(e))


def _require_dish(dish_repo: Any, dish_id: str) -> None:
    if dish_repo.by_id(dish_id) is None:
        raise NotFoundError("Dish", dish_id)


@router.get("/healthz")
def healthz() -> Any:
    return {"status": "ok"}


# -------------------------
# Dishes
# -------------------------
@router.get("/dishes", response_model=List[DishListItem])
async def list_dishes(
    category: Optional[str] = None,
    chain: Optional[str] = None,
    max_price: Optional[float] = Query(default=None, ge=0),
    plz: Optional[str] = Query(default=None, pattern=POSTAL_CODE_PATTERN),
    is_quick: Optional[bool] = None,
    is_meal_prep: Optional[bool] = None,
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    sort: Optional[str] = None,
    user_id: Optional[str] = None,
    uc=Depends(get_list_dishes),
) -> Any:
    if sort is not None and sort not in SORT_KEYS:
        raise HTTPException(status_code=400, detail=f"sort must be one of {', '.join(SORT_KEYS)}")
    filters = DishFilters(
        category=category,
        chain=chain,
        max_price=max_price,
        postal_code=plz,
        is_quick=is_quick,
        is_meal_prep=is_meal_prep,
        limit=limit,
        sort=sort,
        user_id=user_id,
    )
    try:
        return await uc(filters)
    except Exception as e:
        raise _to_http(e, "/dishes")


@router.get("/dishes/{dish_id}", response_model=DishDetailOut)
def dish_detail(
    dish_id: str,
    plz: Optional[str] = Query(default=None, pattern=POSTAL_CODE_PATTERN),
    user_id: Optional[str] = None,
    uc=Depends(get_dish_detail),
) -> Any:
    try:
        return uc(dish_id, postal_code=plz, user_id=user_id)
    except Exception as e:
        raise _to_http(e, "/dishes/{dish_id}")


@router.get("/dishes/{dish_id}/pricing", response_model=DishPricingOut)
def dish_pricing(
    dish_id: str,
    plz: Optional[str] = Query(default=None, pattern=POSTAL_CODE_PATTERN),
    pricing=Depends(get_pricing),
    dish_repo=Depends(get_dish_repo),
) -> Any:
    try:
        _require_dish(dish_repo, dish_id)
        return pricing.price_dish(dish_id, plz).to_dict()
    except Exception as e:
        raise _to_http(e, "/dishes/{dish_id}/pricing")


@router.get("/dishes/{dish_id}/ingredients", response_model=List[IngredientLineOut])
def dish_ingredients(
    dish_id: str,
    plz: Optional[str] = Query(default=None, pattern=POSTAL_CODE_PATTERN),
    pricing=Depends(get_pricing),
    dish_repo=Depends(get_dish_repo),
) -> Any:
    try:
        _require_dish(dish_repo, dish_id)
        return [line_detail(lp) for lp in pricing.price_dish_ingredients(dish_id, plz)]
    except Exception as e:
        raise _to_http(e, "/dishes/{dish_id}/ingredients")


@router.get("/dishes/{dish_id}/chains/{chain_id}/available", response_model=ChainAvailabilityOut)
def dish_chain_available(
    dish_id: str,
    chain_id: int,
    plz: Optional[str] = Query(default=None, pattern=POSTAL_CODE_PATTERN),
    pricing=Depends(get_pricing),
    dish_repo=Depends(get_dish_repo),
) -> Any:
    try:
        _require_dish(dish_repo, dish_id)
        ok = pricing.is_dish_available_for_chain(dish_id, chain_id, plz)
        return {"dish_id": dish_id, "chain_id": chain_id, "available": ok}
    except Exception as e:
        raise _to_http(e, "/dishes/{dish_id}/chains/{chain_id}/available")


# -------------------------
# Lookups
# -------------------------
@router.get("/categories", response_model=List[str])
def categories(dish_repo=Depends(get_dish_repo)) -> Any:
    try:
        return dish_repo.categories()
    except Exception as e:
        raise _to_http(e, "/categories")


@router.get("/chains", response_model=List[ChainOut])
def chains(dish_repo=Depends(get_dish_repo)) -> Any:
    try:
        return [{"id": c.id, "name": c.name} for c in dish_repo.chains()]
    except Exception as e:
        raise _to_http(e, "/chains")


# -------------------------
# Favorites
# -------------------------
@router.get("/users/{user_id}/favorites", response_model=FavoritesOut)
def list_favorites(user_id: str, uc=Depends(get_favorites)) -> Any:
    try:
        return {"user_id": user_id, "dish_ids": uc.list(user_id)}
    except Exception as e:
        raise _to_http(e, "/users/{user_id}/favorites")


@router.put("/users/{user_id}/favorites/{dish_id}", response_model=FavoritesOut)
def add_favorite(user_id: str, dish_id: str, uc=Depends(get_favorites)) -> Any:
    try:
        uc.add(user_id, dish_id)
        return {"user_id": user_id, "dish_ids": uc.list(user_id)}
    except Exception as e:
        raise _to_http(e, "PUT /users/{user_id}/favorites/{dish_id}")


@router.delete("/users/{user_id}/favorites/{dish_id}", response_model=FavoritesOut)
def remove_favorite(user_id: str, dish_id: str, uc=Depends(get_favorites)) -> Any:
    try:
        uc.remove(user_id, dish_id)
        return {"user_id": user_id, "dish_ids": uc.list(user_id)}
    except Exception as e:
        raise _to_http(e, "DELETE /users/{user_id}/favorites/{dish_id}")
