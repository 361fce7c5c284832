from __future__ import annotations

import asyncio
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import event, select
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from backend.app.db.models import Base, SettingEntry

DEFAULT_SQLITE_URL = "sqlite:///./data/orbit.db"
SCHEMA_VERSION_KEY = "schema_version"

# Bare backend names mapped to the async driver each one runs on.
_ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:  # pragma: no cover - event hook
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_file(url: URL) -> Path | None:
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return None
    return Path(url.database)


def normalize_database_url(raw_url: str | None) -> str:
    """Return an async driver URL and create the parent dir of a SQLite file."""

    url = make_url(raw_url or DEFAULT_SQLITE_URL)
    driver = _ASYNC_DRIVERS.get(url.drivername)
    if driver is not None:
        url = url.set(drivername=driver)

    sqlite_file = _sqlite_file(url)
    if sqlite_file is not None:
        sqlite_file.parent.mkdir(parents=True, exist_ok=True)
    return url.render_as_string(hide_password=False)


def create_engine(database_url: str | None) -> AsyncEngine:
    engine = create_async_engine(normalize_database_url(database_url), future=True, echo=False)
    if engine.url.get_backend_name() == "sqlite":
        # ON DELETE CASCADE on mood rows needs the pragma on every connection
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


def _upgrade_to_head(database_url: str) -> None:
    package_dir = Path(__file__).resolve().parent
    config = Config(str(package_dir.parent / "alembic.ini"))
    config.set_main_option("script_location", str(package_dir / "alembic"))
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


async def _stamp_schema_version(
    session_factory: async_sessionmaker[AsyncSession], version: str
) -> None:
    async with session_factory() as session, session.begin():
        setting = await session.scalar(
            select(SettingEntry).where(SettingEntry.key == SCHEMA_VERSION_KEY)
        )
        if setting is None:
            session.add(SettingEntry(key=SCHEMA_VERSION_KEY, value=version))
        else:
            setting.value = version


async def init_db(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    version: str,
    database_url: str | None = None,
) -> None:
    """Migrate the schema, backfill any missing tables and stamp the version.

    Migrations only run when ``database_url`` is given; alembic is synchronous
    so it runs in the default executor.
    """

    if database_url:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _upgrade_to_head, normalize_database_url(database_url))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await _stamp_schema_version(session_factory, version)


__all__ = [
    "create_engine",
    "create_session_factory",
    "init_db",
    "normalize_database_url",
]
