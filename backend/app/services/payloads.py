"""Turn raw JSON bodies into typed create/update records.

Checks run in a fixed order and the first failure wins, so clients always see
the same message for the same bad payload.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from ..core.errors import AuthenticationFailed, ValidationFailed
from ..core.security import password_fits_bcrypt
from ..core.validators import (
    MAX_ID,
    is_date_only,
    is_not_future_date,
    is_valid_date,
    is_valid_date_range,
    is_valid_email,
    is_valid_level,
    is_valid_password,
    is_valid_rating,
    parse_int_or_default,
    parse_iso_datetime,
    sanitize_string,
    to_number,
    validate_required_fields,
)
from ..schemas.mood import MoodComponentIn, MoodCreate, MoodUpdate
from ..schemas.user import LoginRequest, UserCreate, UserUpdate
from .emotions import validate_mood_components

MISSING_FIELDS = "Campos faltantes"
NOTHING_TO_UPDATE = "Nenhum campo para atualizar"
INVALID_BODY = "Corpo da requisição inválido"
INVALID_EMAIL = "Email inválido"
SHORT_PASSWORD = "Senha deve ter pelo menos 6 caracteres"
LONG_PASSWORD = "Senha deve ter no máximo 72 bytes"
LOGIN_REQUIRED = "Email e senha são obrigatórios"
INVALID_CREDENTIALS = "Credenciais inválidas"
INVALID_TIMEZONE = "Fuso horário inválido"
INVALID_USER_ID = "user_id inválido"
INVALID_RECORDED_AT = "recorded_at deve ser uma data válida"
FUTURE_RECORDED_AT = "recorded_at não pode ser no futuro"
INVALID_START_DATE = "Data de início inválida"
INVALID_END_DATE = "Data de fim inválida"
INVALID_DATE_RANGE = "Intervalo de datas inválido"

USER_REQUIRED_FIELDS = ("email", "password", "first_name", "last_name")
MOOD_REQUIRED_FIELDS = ("user_id", "stress_level", "anxiety_level", "energy_level", "recorded_at")
LEVEL_FIELDS = ("stress_level", "anxiety_level", "energy_level")


@dataclass(frozen=True)
class DateWindow:
    """Optional ``recorded_at`` bounds for list and stats queries."""

    start: datetime | None = None
    end: datetime | None = None
    end_exclusive: bool = False
    raw_start: str | None = None
    raw_end: str | None = None


def level_error(field: str) -> str:
    return f"{field} deve ser entre 1 e 10"


def _ensure_object(data: Any) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValidationFailed(INVALID_BODY)
    return data


def _parse_level(field: str, value: Any) -> int:
    check = is_valid_rating if field == "rating" else is_valid_level
    if not check(value):
        raise ValidationFailed(level_error(field))
    return int(to_number(value))


def _parse_optional_rating(value: Any) -> int | None:
    if value is None:
        return None
    return _parse_level("rating", value)


def _parse_recorded_at(value: Any) -> datetime:
    if not is_valid_date(value):
        raise ValidationFailed(INVALID_RECORDED_AT)
    if not is_not_future_date(value):
        raise ValidationFailed(FUTURE_RECORDED_AT)
    return parse_iso_datetime(value)


def _parse_components(value: Any) -> list[MoodComponentIn]:
    check = validate_mood_components(value)
    if not check.valid:
        raise ValidationFailed(check.error or INVALID_BODY)
    return [
        MoodComponentIn(
            emotion=item["emotion"].lower(),
            intensity=int(to_number(item["intensity"])),
        )
        for item in value
    ]


def _optional_text(value: Any) -> str | None:
    return sanitize_string(value) or None


def _required_name(field: str, value: Any) -> str:
    cleaned = sanitize_string(value)
    if not cleaned:
        raise ValidationFailed(MISSING_FIELDS, missing=[field])
    return cleaned


def _parse_password(value: Any) -> str:
    if not is_valid_password(value):
        raise ValidationFailed(SHORT_PASSWORD)
    if not password_fits_bcrypt(value):
        raise ValidationFailed(LONG_PASSWORD)
    return value


# -- users ---------------------------------------------------------------
def parse_user_create(data: Any, *, default_timezone: str = "UTC") -> UserCreate:
    body = _ensure_object(data)
    missing = validate_required_fields(body, USER_REQUIRED_FIELDS)
    if missing:
        raise ValidationFailed(MISSING_FIELDS, missing=missing)

    email = body["email"]
    if not is_valid_email(email):
        raise ValidationFailed(INVALID_EMAIL)
    password = _parse_password(body["password"])

    return UserCreate(
        email=email.lower(),
        password=password,
        first_name=_required_name("first_name", body["first_name"]),
        last_name=_required_name("last_name", body["last_name"]),
        timezone=sanitize_string(body.get("timezone")) or default_timezone,
    )


def parse_login(data: Any) -> LoginRequest:
    body = _ensure_object(data)
    if validate_required_fields(body, ("email", "password")):
        raise ValidationFailed(LOGIN_REQUIRED)
    email = body["email"]
    password = body["password"]
    if not isinstance(email, str) or not isinstance(password, str):
        raise AuthenticationFailed(INVALID_CREDENTIALS)
    return LoginRequest(email=email.lower(), password=password)


def parse_user_update(data: Any) -> UserUpdate:
    body = _ensure_object(data)
    values: dict[str, Any] = {}

    if "email" in body:
        email = body["email"]
        if not is_valid_email(email):
            raise ValidationFailed(INVALID_EMAIL)
        values["email"] = email.lower()
    if "password" in body:
        values["password"] = _parse_password(body["password"])
    for field in ("first_name", "last_name"):
        if field in body:
            values[field] = _required_name(field, body[field])
    if "timezone" in body:
        timezone = sanitize_string(body["timezone"])
        if not timezone:
            raise ValidationFailed(INVALID_TIMEZONE)
        values["timezone"] = timezone

    if not values:
        raise ValidationFailed(NOTHING_TO_UPDATE)
    return UserUpdate(**values)


# -- moods ---------------------------------------------------------------
def parse_mood_create(data: Any) -> MoodCreate:
    body = _ensure_object(data)
    missing = validate_required_fields(body, MOOD_REQUIRED_FIELDS)
    if missing:
        raise ValidationFailed(MISSING_FIELDS, missing=missing)

    user_id = parse_int_or_default(body["user_id"])
    if user_id is None or not 1 <= user_id <= MAX_ID:
        raise ValidationFailed(INVALID_USER_ID)

    rating = _parse_optional_rating(body.get("rating"))
    levels = {field: _parse_level(field, body[field]) for field in LEVEL_FIELDS}
    recorded_at = _parse_recorded_at(body["recorded_at"])

    components = None
    if body.get("mood_components") is not None:
        components = _parse_components(body["mood_components"])

    return MoodCreate(
        user_id=user_id,
        rating=rating,
        recorded_at=recorded_at,
        title=_optional_text(body.get("title")),
        description=_optional_text(body.get("description")),
        mood_components=components,
        **levels,
    )


def parse_mood_update(data: Any) -> MoodUpdate:
    body = _ensure_object(data)
    values: dict[str, Any] = {}

    if "rating" in body:
        values["rating"] = _parse_optional_rating(body["rating"])
    for field in LEVEL_FIELDS:
        if field in body:
            values[field] = _parse_level(field, body[field])
    for field in ("title", "description"):
        if field in body:
            values[field] = _optional_text(body[field])
    if "recorded_at" in body:
        values["recorded_at"] = _parse_recorded_at(body["recorded_at"])
    if "mood_components" in body:
        values["mood_components"] = _parse_components(body["mood_components"])

    if not values:
        raise ValidationFailed(NOTHING_TO_UPDATE)
    return MoodUpdate(**values)


def parse_date_window(start_date: str | None, end_date: str | None) -> DateWindow:
    start_raw = start_date or None
    end_raw = end_date or None

    if start_raw is not None and not is_valid_date(start_raw):
        raise ValidationFailed(INVALID_START_DATE)
    if end_raw is not None and not is_valid_date(end_raw):
        raise ValidationFailed(INVALID_END_DATE)
    if start_raw is not None and end_raw is not None and not is_valid_date_range(start_raw, end_raw):
        raise ValidationFailed(INVALID_DATE_RANGE)

    end = parse_iso_datetime(end_raw) if end_raw is not None else None
    end_exclusive = False
    if end is not None and is_date_only(end_raw):
        # A bare date covers the whole day.
        end = end + timedelta(days=1)
        end_exclusive = True

    return DateWindow(
        start=parse_iso_datetime(start_raw) if start_raw is not None else None,
        end=end,
        end_exclusive=end_exclusive,
        raw_start=start_raw,
        raw_end=end_raw,
    )


__all__ = [
    "DateWindow",
    "level_error",
    "parse_date_window",
    "parse_login",
    "parse_mood_create",
    "parse_mood_update",
    "parse_user_create",
    "parse_user_update",
]
