# backend/warehouse/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Reorder thresholds assigned the first time a product is stocked.
# Keyed by Category.reorder_class; later category changes never recompute them.
REORDER_THRESHOLDS = {
    "BEVERAGE": {"reorder_level": 100, "reorder_quantity": 200},
    "SNACK": {"reorder_level": 100, "reorder_quantity": 200},
    "DAIRY": {"reorder_level": 50, "reorder_quantity": 100},
    "PRODUCE": {"reorder_level": 50, "reorder_quantity": 100},
    "MEAT": {"reorder_level": 25, "reorder_quantity": 50},
    "FROZEN": {"reorder_level": 75, "reorder_quantity": 150},
    "STANDARD": {"reorder_level": 50, "reorder_quantity": 100},
}

DEFAULT_REORDER_CLASS = "STANDARD"


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/warehouse.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///warehouse.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Reject sales orders that push a customer past their credit limit
    ENFORCE_CREDIT_LIMIT = _env_flag("ENFORCE_CREDIT_LIMIT", True)

    # Floor price convention: cost plus 15% (basis points)
    FLOOR_PRICE_MARKUP_BPS = int(os.environ.get("FLOOR_PRICE_MARKUP_BPS", "1500"))

    # When False, floor prices only change through an explicit recompute
    AUTO_RECOMPUTE_FLOOR_PRICE = _env_flag("AUTO_RECOMPUTE_FLOOR_PRICE", False)

    REORDER_THRESHOLDS = REORDER_THRESHOLDS
