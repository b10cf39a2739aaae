from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError
from .money import MONEY_LIMIT, to_money

E = TypeVar("E", bound=Enum)

def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return str(value).strip()

def require_int(value: Any, field_name: str) -> int:
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required", field=field_name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer", field=field_name) from None

def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_int(value, field_name)

def require_decimal(value: Any, field_name: str) -> Decimal:
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required", field=field_name)
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", field=field_name) from None
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    return result

def optional_decimal(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return require_decimal(value, field_name)

def require_money(value: Any, field_name: str) -> Decimal:
    result = require_decimal(value, field_name)
    if abs(result) < MONEY_LIMIT:
        result = to_money(result)
    if abs(result) >= MONEY_LIMIT:
        raise ValidationError(f"{field_name} is out of range", field=field_name)
    return result

def optional_money(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return require_money(value, field_name)

def require_non_negative(value: Decimal, field_name: str) -> Decimal:
    if value < 0:
        raise ValidationError(f"{field_name} cannot be negative", field=field_name)
    return value

def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name}. Allowed: {allowed}", field=field_name) from None
