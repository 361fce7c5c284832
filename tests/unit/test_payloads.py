from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from backend.app.core.errors import AuthenticationFailed, ValidationFailed
from backend.app.services.payloads import (
    parse_date_window,
    parse_login,
    parse_mood_create,
    parse_mood_update,
    parse_user_create,
    parse_user_update,
)


def _mood_body(**overrides):
    body = {
        "user_id": 1,
        "stress_level": 3,
        "anxiety_level": 4,
        "energy_level": 5,
        "recorded_at": "2024-01-15T10:00:00Z",
    }
    body.update(overrides)
    return body


def test_user_create_reports_missing_fields() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        parse_user_create({"email": "a@b.co"})
    assert excinfo.value.to_content() == {
        "error": "Campos faltantes",
        "missing": ["password", "first_name", "last_name"],
    }


def test_user_create_without_body_lists_every_field() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        parse_user_create(None)
    assert excinfo.value.missing == ["email", "password", "first_name", "last_name"]


def test_user_create_rejects_non_object_body() -> None:
    with pytest.raises(ValidationFailed):
        parse_user_create(["not", "an", "object"])


def test_user_create_checks_email_then_password() -> None:
    with pytest.raises(ValidationFailed, match="Email inválido"):
        parse_user_create(
            {"email": "invalido", "password": "123", "first_name": "A", "last_name": "B"}
        )
    with pytest.raises(ValidationFailed, match="Senha deve ter pelo menos 6 caracteres"):
        parse_user_create(
            {"email": "a@b.co", "password": "123", "first_name": "A", "last_name": "B"}
        )


def test_user_create_rejects_passwords_beyond_bcrypt_limit() -> None:
    with pytest.raises(ValidationFailed, match="72 bytes"):
        parse_user_create(
            {"email": "a@b.co", "password": "ç" * 40, "first_name": "A", "last_name": "B"}
        )


def test_user_create_normalises_values() -> None:
    user = parse_user_create(
        {
            "email": "Teste@Example.COM",
            "password": "senha123",
            "first_name": "  João ",
            "last_name": "Silva",
        },
        default_timezone="America/Sao_Paulo",
    )
    assert user.email == "teste@example.com"
    assert user.first_name == "João"
    assert user.timezone == "America/Sao_Paulo"


def test_user_create_blank_name_counts_as_missing() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        parse_user_create(
            {"email": "a@b.co", "password": "senha123", "first_name": "   ", "last_name": "B"}
        )
    assert excinfo.value.missing == ["first_name"]


def test_login_requires_both_fields() -> None:
    with pytest.raises(ValidationFailed, match="Email e senha são obrigatórios"):
        parse_login({"email": "a@b.co"})


def test_login_rejects_non_string_credentials() -> None:
    with pytest.raises(AuthenticationFailed):
        parse_login({"email": "a@b.co", "password": 123456})


def test_login_lowercases_without_trimming() -> None:
    credentials = parse_login({"email": " A@B.co", "password": "x"})
    assert credentials.email == " a@b.co"


def test_user_update_collects_present_fields_in_order() -> None:
    update = parse_user_update({"timezone": "Europe/Lisbon", "email": "NEW@b.co"})
    assert update.present_fields() == ["email", "timezone"]
    assert update.email == "new@b.co"


def test_user_update_rejects_empty_body() -> None:
    with pytest.raises(ValidationFailed, match="Nenhum campo para atualizar"):
        parse_user_update({})
    with pytest.raises(ValidationFailed, match="Nenhum campo para atualizar"):
        parse_user_update({"unknown": 1})


def test_user_update_validates_fields() -> None:
    with pytest.raises(ValidationFailed, match="Email inválido"):
        parse_user_update({"email": "bad"})
    with pytest.raises(ValidationFailed, match="pelo menos 6"):
        parse_user_update({"password": "123"})


def test_mood_create_minimal() -> None:
    mood = parse_mood_create(_mood_body())
    assert mood.user_id == 1
    assert mood.rating is None
    assert mood.title is None
    assert mood.mood_components is None
    assert mood.recorded_at == datetime(2024, 1, 15, 10, 0)


def test_mood_create_reports_missing_fields() -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        parse_mood_create({"user_id": 1})
    assert excinfo.value.missing == [
        "stress_level",
        "anxiety_level",
        "energy_level",
        "recorded_at",
    ]


@pytest.mark.parametrize("field", ["rating", "stress_level", "anxiety_level", "energy_level"])
@pytest.mark.parametrize("value", [0, 11, "abc"])
def test_mood_create_level_ranges(field, value) -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        parse_mood_create(_mood_body(**{field: value}))
    assert excinfo.value.message == f"{field} deve ser entre 1 e 10"


def test_mood_create_rejects_bad_user_id() -> None:
    with pytest.raises(ValidationFailed, match="user_id inválido"):
        parse_mood_create(_mood_body(user_id="abc"))
    with pytest.raises(ValidationFailed, match="user_id inválido"):
        parse_mood_create(_mood_body(user_id=2**63))


def test_mood_create_recorded_at_checks() -> None:
    with pytest.raises(ValidationFailed, match="recorded_at deve ser uma data válida"):
        parse_mood_create(_mood_body(recorded_at="ontem"))
    tomorrow = (datetime.now(UTC) + timedelta(days=1)).isoformat()
    with pytest.raises(ValidationFailed, match="recorded_at não pode ser no futuro"):
        parse_mood_create(_mood_body(recorded_at=tomorrow))


def test_mood_create_components_are_lowercased() -> None:
    mood = parse_mood_create(
        _mood_body(mood_components=[{"emotion": "JOY", "intensity": "8"}])
    )
    assert [(item.emotion, item.intensity) for item in mood.mood_components] == [("joy", 8)]


def test_mood_create_component_errors_surface() -> None:
    with pytest.raises(ValidationFailed, match="Invalid emotion: rage"):
        parse_mood_create(_mood_body(mood_components=[{"emotion": "rage", "intensity": 3}]))


def test_mood_create_blank_title_is_none() -> None:
    mood = parse_mood_create(_mood_body(title="   ", description="  dia bom "))
    assert mood.title is None
    assert mood.description == "dia bom"


def test_mood_update_tracks_presence() -> None:
    update = parse_mood_update({"energy_level": 9, "rating": None})
    assert update.present_fields() == ["rating", "energy_level"]
    assert update.rating is None
    assert not update.replaces_components


def test_mood_update_empty_component_list_replaces() -> None:
    update = parse_mood_update({"mood_components": []})
    assert update.replaces_components
    assert update.mood_components == []
    assert update.present_fields() == []


def test_mood_update_validation_errors() -> None:
    with pytest.raises(ValidationFailed, match="stress_level deve ser entre 1 e 10"):
        parse_mood_update({"stress_level": 15})
    with pytest.raises(ValidationFailed, match="Nenhum campo para atualizar"):
        parse_mood_update({})
    with pytest.raises(ValidationFailed, match="Duplicate emotion: joy"):
        parse_mood_update(
            {
                "mood_components": [
                    {"emotion": "joy", "intensity": 3},
                    {"emotion": "joy", "intensity": 4},
                ]
            }
        )


def test_date_window_empty() -> None:
    window = parse_date_window(None, None)
    assert window.start is None
    assert window.end is None


def test_date_window_date_only_end_covers_day() -> None:
    window = parse_date_window("2024-01-01", "2024-01-31")
    assert window.start == datetime(2024, 1, 1)
    assert window.end == datetime(2024, 2, 1)
    assert window.end_exclusive
    assert (window.raw_start, window.raw_end) == ("2024-01-01", "2024-01-31")


def test_date_window_datetime_end_is_inclusive() -> None:
    window = parse_date_window(None, "2024-01-31T12:00:00")
    assert window.end == datetime(2024, 1, 31, 12, 0)
    assert not window.end_exclusive


@pytest.mark.parametrize(
    ("start", "end", "message"),
    [
        ("bad", None, "Data de início inválida"),
        (None, "bad", "Data de fim inválida"),
        ("2024-02-01", "2024-01-01", "Intervalo de datas inválido"),
    ],
)
def test_date_window_rejections(start, end, message) -> None:
    with pytest.raises(ValidationFailed, match=message):
        parse_date_window(start, end)
