# mealdeal/src/core/config.py
from __future__ import annotations
from dataclasses import dataclass
import os
import logging

# Mongo settings
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB: str = os.getenv("MONGO_DB", "mealdeal")
MONGO_TIMEOUT_MS: int = int(os.getenv("MONGO_TIMEOUT_MS", "3000"))

# API settings
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8081"))
DEFAULT_LIST_LIMIT: int = int(os.getenv("DEFAULT_LIST_LIMIT", "50"))
MAX_LIST_LIMIT: int = int(os.getenv("MAX_LIST_LIMIT", "200"))

# German PLZ format, checked at the HTTP edge only
POSTAL_CODE_PATTERN: str = r"^\d{5}$"


@dataclass(frozen=True)
class Collections:
    DISHES: str = os.getenv("MONGO_DISHES_COL", "dishes")
    INGREDIENTS: str = os.getenv("MONGO_INGREDIENTS_COL", "ingredients")
    DISH_INGREDIENTS: str = os.getenv("MONGO_DISH_INGREDIENTS_COL", "dish_ingredients")
    OFFERS: str = os.getenv("MONGO_OFFERS_COL", "offers")
    REGIONS: str = os.getenv("MONGO_REGIONS_COL", "ad_regions")
    POSTAL_CODES: str = os.getenv("MONGO_POSTAL_CODES_COL", "postal_codes")
    CHAINS: str = os.getenv("MONGO_CHAINS_COL", "chains")
    CATEGORIES: str = os.getenv("MONGO_CATEGORIES_COL", "lookups_categories")
    FAVORITES: str = os.getenv("MONGO_FAVORITES_COL", "favorites")


# Global logging (module-level loggers inherit this)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
