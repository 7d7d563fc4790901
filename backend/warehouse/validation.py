# Overview: Payload validation shared by routes and services; field policies, coercion and money rules.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Largest accepted money amount: $9,999,999.99
MAX_MONEY_CENTS = 999_999_999

PRODUCT_MONEY_FIELDS = ("cost_cents", "retail_price_cents", "floor_price_cents")
CUSTOMER_STATUSES = ("active", "inactive")


class ValidationError(ValueError):
    """Bad client input (HTTP 400)."""


class ConflictError(ValueError):
    """Input clashes with stored data, e.g. a duplicate SKU (HTTP 409)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Which columns a client may send for a model.

    writable_fields: allowlist; any other key is rejected
    required_on_create: keys that must be present on create
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)


def coerce_int(key: str, value: Any) -> int:
    """Strict integer: accepts ints and digit strings, rejects bools, floats and exponents."""
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    if isinstance(value, str):
        text = value.strip()
        if "." in text:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        if "e" in text.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        try:
            return int(text)
        except ValueError:
            pass
    raise ValidationError(f"{key} must be an integer")


def coerce_number(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"{key} must be a number")


def _coerce_column(col, value: Any):
    if isinstance(col.type, Integer):
        return coerce_int(col.key, value)
    if isinstance(col.type, Float):
        return coerce_number(col.key, value)
    if isinstance(col.type, (String, Text)):
        text = str(value).strip()
        if not text and not col.nullable:
            raise ValidationError(f"{col.key} cannot be blank")
        length = getattr(col.type, "length", None)
        if length and len(text) > length:
            raise ValidationError(f"{col.key} exceeds max length {length}")
        return text
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Turn a JSON body into a clean patch for `model`.

    Keys outside policy.writable_fields are rejected rather than ignored, so
    read-only columns (balances, ids, timestamps) can never be set by a
    client. Values are coerced using the column type; NOT NULL columns
    reject null and blank strings.

    partial=False is create semantics and also checks required_on_create.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(policy.required_on_create - set(payload))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}
    patch: dict = {}
    for key, raw in payload.items():
        if key not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {key}")
        col = columns.get(key)
        if col is None:
            raise ValidationError(f"Unknown field: {key}")

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
        else:
            patch[key] = _coerce_column(col, raw)
    return patch


def enforce_money(key: str, value: int | None) -> None:
    if value is None:
        return
    if value < 0:
        raise ValidationError(f"{key} must be >= 0")
    if value > MAX_MONEY_CENTS:
        raise ValidationError(f"{key} cannot exceed {MAX_MONEY_CENTS} (${MAX_MONEY_CENTS / 100:,.2f})")


def enforce_rules_product(patch: dict) -> None:
    """Rules on product values that column metadata cannot express."""
    for key in PRODUCT_MONEY_FIELDS:
        if key in patch:
            enforce_money(key, patch[key])

    for key in ("case_pack_count", "package_size"):
        if patch.get(key) is not None and patch[key] <= 0:
            raise ValidationError(f"{key} must be > 0")


def enforce_rules_customer(patch: dict) -> None:
    if "credit_limit_cents" in patch:
        enforce_money("credit_limit_cents", patch["credit_limit_cents"])

    if "status" in patch and patch["status"] not in CUSTOMER_STATUSES:
        raise ValidationError("status must be 'active' or 'inactive'")


def validate_order_line(raw: Any, *, price_key: str) -> dict:
    """
    Normalize one order line {product_id, quantity, <price_key>} to ints.

    quantity must be positive; the price must be a valid money amount.
    """
    if not isinstance(raw, dict):
        raise ValidationError("Each item must be an object")

    for key in ("product_id", "quantity", price_key):
        if raw.get(key) is None:
            raise ValidationError(f"Each item requires {key}")

    line = {key: coerce_int(key, raw[key]) for key in ("product_id", "quantity", price_key)}
    if line["quantity"] <= 0:
        raise ValidationError("quantity must be > 0")
    enforce_money(price_key, line[price_key])
    return line
