from __future__ import annotations

import logging
from datetime import date
from typing import Callable

import uvicorn
from fastapi import FastAPI
from pymongo import MongoClient
from dotenv import load_dotenv
load_dotenv()
from src.api.routes import router
from src.core.config import API_HOST, API_PORT, MONGO_DB, MONGO_TIMEOUT_MS, MONGO_URI

from src.application.dish_pricing import DishPricingService
from src.application.usecases import GetDishDetail, ListDishes, ManageFavorites
from src.domain.repositories import DishReadRepo, FavoriteRepo, ReferenceDataRepo
from src.infrastructure.mongo_repositories import (
    MongoDishRepository,
    MongoFavoriteRepository,
    MongoReferenceRepository,
)

log = logging.getLogger("app")
app = FastAPI(title="MealDeal")

_mongo_client: MongoClient | None = None


def wire(
    target: FastAPI,
    reference_repo: ReferenceDataRepo,
    dish_repo: DishReadRepo,
    favorite_repo: FavoriteRepo,
    clock: Callable[[], date] = date.today,
) -> None:
    pricing = DishPricingService(reference_repo, clock=clock)

    # DI for routes.py
    target.state.pricing = pricing
    target.state.dish_repo = dish_repo
    target.state.list_dishes_uc = ListDishes(dish_repo, pricing, favorite_repo)
    target.state.dish_detail_uc = GetDishDetail(dish_repo, pricing, favorite_repo)
    target.state.favorites_uc = ManageFavorites(dish_repo, favorite_repo)

    target.include_router(router)


@app.on_event("startup")
def on_startup() -> None:
    global _mongo_client

    _mongo_client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=MONGO_TIMEOUT_MS)
    db = _mongo_client[MONGO_DB]
    wire(
        app,
        reference_repo=MongoReferenceRepository(db),
        dish_repo=MongoDishRepository(db),
        favorite_repo=MongoFavoriteRepository(db),
    )
    log.info("Startup complete (db=%s)", MONGO_DB)


@app.on_event("shutdown")
def on_shutdown() -> None:
    global _mongo_client
    if _mongo_client:
        _mongo_client.close()


if __name__ == "__main__":
    uvicorn.run("main:app", host=API_HOST, port=API_PORT, reload=False)
