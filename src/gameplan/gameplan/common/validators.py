from __future__ import annotations

from typing import Mapping, Sequence

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_fields(data: Mapping[str, object], fields: Sequence[str]) -> None:
    missing = [f for f in fields if data.get(f) is None or not str(data.get(f)).strip()]
    if missing:
        raise ValidationError("Please fill in all mandatory fields: " + ", ".join(missing))


def require_matching(value: str, other: str, message: str) -> None:
    if value != other:
        raise ValidationError(message)


def require_int(value: object, field_name: str) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")


def require_float(value: object, field_name: str) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
