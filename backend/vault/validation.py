from __future__ import annotations
from datetime import datetime
import re

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .models import User, ProductOrService, Sale, IncomeStatement, ClientQuery
from .time_utils import parse_iso_datetime


# Upper bound for any cents amount: 9,999,999.99 in major units
MAX_AMOUNT_CENTS = 999_999_999

# Integer columns are 32-bit signed on every supported database
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(ValueError):
    """
    400-level input problem.

    Carries every problem found in the payload as a list of
    {"field": ..., "message": ...} dicts.
    """

    def __init__(self, errors: list[dict] | str, field: str | None = None):
        if isinstance(errors, str):
            errors = [{"field": field, "message": errors}]
        self.errors = errors
        super().__init__("; ".join(e["message"] for e in errors))


class NotFoundError(LookupError):
    """404-level missing resource."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - extra_fields: accepted string fields that are not columns (e.g. a raw
      password that is hashed before it reaches the table)
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    extra_fields: set[str] = field(default_factory=set)


USER_POLICY = ModelValidationPolicy(
    writable_fields={"username", "full_name", "email", "role"},
    required_on_create={"username", "password", "full_name", "email", "role"},
    extra_fields={"password"},
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "category"},
    required_on_create={"name", "description", "price", "category"},
)

SALE_POLICY = ModelValidationPolicy(
    writable_fields={"product_id", "quantity", "total_amount", "date", "created_by"},
    required_on_create={"product_id", "quantity", "total_amount", "created_by"},
)

INCOME_POLICY = ModelValidationPolicy(
    writable_fields={"month", "year", "total_revenue", "total_expenses", "net_profit", "created_by"},
    required_on_create={"month", "year", "total_revenue", "total_expenses", "net_profit", "created_by"},
)

QUERY_POLICY = ModelValidationPolicy(
    writable_fields={"client_name", "client_email", "message"},
    required_on_create={"client_name", "client_email", "message"},
)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def fits_integer_column(value: int) -> bool:
    return INT_MIN <= value <= INT_MAX


def _check_integer_range(col, value: int) -> int:
    if not fits_integer_column(value):
        raise ValidationError(f"{col.key} must be between {INT_MIN} and {INT_MAX}", field=col.key)
    return value


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Enums before strings: sqlalchemy.Enum subclasses String
    if isinstance(coltype, Enum):
        if value not in coltype.enums:
            raise ValidationError(f"{col.key} must be one of: {', '.join(coltype.enums)}", field=col.key)
        return value

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return _check_integer_range(col, value)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer", field=col.key)
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)", field=col.key)
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)", field=col.key)
            try:
                parsed = int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer", field=col.key)
            return _check_integer_range(col, parsed)
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal", field=col.key)
        raise ValidationError(f"{col.key} must be an integer", field=col.key)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", field=col.key)
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", field=col.key)
            return dt
        raise ValidationError(f"{col.key} must be a datetime", field=col.key)

    if isinstance(coltype, (String, Text)):
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ValidationError(f"{col.key} must be a string", field=col.key)
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length, Enum members)
    - a policy allowlist (writable_fields + extra_fields)
    - required_on_create
    Returns a cleaned patch dict with only writable fields.

    All problems are collected; a single ValidationError lists them.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    errors: list[dict] = []

    for f in sorted(policy.required_on_create):
        if f not in payload:
            errors.append({"field": f, "message": f"{f} is required"})

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        if k in policy.extra_fields:
            if not isinstance(raw, str) or not raw.strip():
                errors.append({"field": k, "message": f"{k} must be a non-empty string"})
            else:
                patch[k] = raw
            continue

        if k not in policy.writable_fields:
            errors.append({"field": k, "message": f"Field not allowed: {k}"})
            continue
        if k not in cols:
            errors.append({"field": k, "message": f"Unknown field: {k}"})
            continue

        col = cols[k]

        if raw is None:
            if not col.nullable:
                errors.append({"field": k, "message": f"{k} cannot be null"})
            else:
                patch[k] = None
            continue

        try:
            val = _coerce_value(col, raw)
        except ValidationError as e:
            errors.extend(e.errors)
            continue

        if isinstance(col.type, (String, Text)) and not isinstance(col.type, Enum) and not col.nullable:
            if isinstance(val, str) and val == "":
                errors.append({"field": k, "message": f"{k} cannot be blank"})
                continue

        if isinstance(col.type, String) and not isinstance(col.type, Enum) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                errors.append({"field": k, "message": f"{k} exceeds max length {col.type.length}"})
                continue

        patch[k] = val

    if errors:
        raise ValidationError(errors)

    return patch


def _check_amount(patch: dict, key: str, errors: list[dict], *, allow_negative: bool = False) -> None:
    value = patch.get(key)
    if value is None:
        return
    if not allow_negative and value < 0:
        errors.append({"field": key, "message": f"{key} must be >= 0"})
    elif abs(value) > MAX_AMOUNT_CENTS:
        errors.append({"field": key, "message": f"{key} cannot exceed {MAX_AMOUNT_CENTS}"})


def _check_email(patch: dict, key: str, errors: list[dict]) -> None:
    value = patch.get(key)
    if value is not None and not _EMAIL_RE.match(value):
        errors.append({"field": key, "message": f"{key} must be a valid email address"})


def enforce_rules_user(patch: dict) -> None:
    errors: list[dict] = []
    _check_email(patch, "email", errors)
    if errors:
        raise ValidationError(errors)


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    errors: list[dict] = []
    _check_amount(patch, "price", errors)
    if errors:
        raise ValidationError(errors)


def enforce_rules_sale(patch: dict) -> None:
    errors: list[dict] = []
    if patch.get("quantity") is not None and patch["quantity"] <= 0:
        errors.append({"field": "quantity", "message": "quantity must be > 0"})
    _check_amount(patch, "total_amount", errors)
    if errors:
        raise ValidationError(errors)


def enforce_rules_income(patch: dict) -> None:
    errors: list[dict] = []
    month = patch.get("month")
    if month is not None and not 1 <= month <= 12:
        errors.append({"field": "month", "message": "month must be between 1 and 12"})
    year = patch.get("year")
    if year is not None and not 1900 <= year <= 9999:
        errors.append({"field": "year", "message": "year must be between 1900 and 9999"})
    _check_amount(patch, "total_revenue", errors)
    _check_amount(patch, "total_expenses", errors)
    _check_amount(patch, "net_profit", errors, allow_negative=True)
    if errors:
        raise ValidationError(errors)


def enforce_rules_query(patch: dict) -> None:
    errors: list[dict] = []
    _check_email(patch, "client_email", errors)
    if errors:
        raise ValidationError(errors)


def validate_user(payload: dict) -> dict:
    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY)
    enforce_rules_user(patch)
    return patch


def validate_product(payload: dict) -> dict:
    patch = validate_payload(model=ProductOrService, payload=payload, policy=PRODUCT_POLICY)
    enforce_rules_product(patch)
    return patch


def validate_sale(payload: dict) -> dict:
    patch = validate_payload(model=Sale, payload=payload, policy=SALE_POLICY)
    enforce_rules_sale(patch)
    return patch


def validate_income_statement(payload: dict) -> dict:
    patch = validate_payload(model=IncomeStatement, payload=payload, policy=INCOME_POLICY)
    enforce_rules_income(patch)
    return patch


def validate_client_query(payload: dict) -> dict:
    patch = validate_payload(model=ClientQuery, payload=payload, policy=QUERY_POLICY)
    enforce_rules_query(patch)
    return patch
