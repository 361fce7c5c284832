from __future__ import annotations

from collections.abc import AsyncIterator, Generator
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from backend.app.core.config import Settings
from backend.app.main import create_app
from backend.app.services.storage import StorageService
from backend.db import create_engine, create_session_factory, init_db

FAST_BCRYPT_ROUNDS = 4


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


def _sqlite_url(tmp_path: Path, prefix: str) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / f'{prefix}_{uuid4().hex}.db'}"


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=_sqlite_url(tmp_path, "api"),
        log_file=tmp_path / "logs" / "orbit.log",
        bcrypt_rounds=FAST_BCRYPT_ROUNDS,
        version="0.1.0-test",
    )


@pytest.fixture()
def test_client(test_settings: Settings) -> Generator[TestClient, None, None]:
    app = create_app(test_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture()
async def temp_session_factory(anyio_backend: str, tmp_path: Path) -> AsyncIterator:
    database_url = _sqlite_url(tmp_path, "unit")
    engine = create_engine(database_url)
    session_factory = create_session_factory(engine)
    await init_db(engine, session_factory, "test", database_url)
    try:
        yield session_factory
    finally:
        await engine.dispose()


@pytest.fixture()
def storage(temp_session_factory) -> StorageService:
    return StorageService(temp_session_factory, password_rounds=FAST_BCRYPT_ROUNDS)


@pytest.fixture()
def user_payload() -> dict[str, str]:
    return {
        "email": "teste@example.com",
        "password": "senha123",
        "first_name": "João",
        "last_name": "Silva",
    }


@pytest.fixture()
def user_id(test_client: TestClient, user_payload: dict[str, str]) -> int:
    response = test_client.post("/users", json=user_payload)
    assert response.status_code == 201
    return response.json()["id"]
