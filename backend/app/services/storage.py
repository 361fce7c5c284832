from __future__ import annotations

import asyncio
import logging
import math
from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, desc, func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import joinedload, selectinload

from ..core.errors import AuthenticationFailed, ConflictError, NotFoundError
from ..core.security import hash_password, verify_password
from ..core.validators import Pagination
from ..db.models import MoodComponent, MoodEntry, User
from ..schemas.mood import MoodCreate, MoodUpdate
from ..schemas.user import UserCreate, UserUpdate
from .payloads import INVALID_CREDENTIALS, DateWindow

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "Usuário não encontrado"
MOOD_NOT_FOUND = "Humor não encontrado"
EMAIL_REGISTERED = "Email já cadastrado"
EMAIL_IN_USE = "Email já está em uso"

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def _sunday_first(moment: datetime) -> int:
    # datetime.weekday() is Monday-first.
    return (moment.weekday() + 1) % 7


def _rounded(value: Any) -> float:
    if value is None:
        return 0.0
    return round(float(value), 2)


def _mean(values: Sequence[float | int | None]) -> float:
    present = [value for value in values if value is not None]
    if not present:
        return 0.0
    return round(sum(present) / len(present), 2)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class StorageService:
    """Persist users, mood entries and their emotion components."""

    def __init__(self, session_factory: async_sessionmaker, *, password_rounds: int = 12) -> None:
        self._session_factory = session_factory
        self._password_rounds = password_rounds
        self._dummy_hash: str | None = None

    async def healthcheck(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(hash_password, password, self._password_rounds)

    # -- user management -------------------------------------------------
    async def create_user(self, payload: UserCreate) -> User:
        hashed = await self._hash(payload.password)
        async with self._session_factory() as session:
            existing = await session.scalar(select(User.id).where(User.email == payload.email))
            if existing is not None:
                raise ConflictError(EMAIL_REGISTERED)
            user = User(
                email=payload.email,
                password=hashed,
                first_name=payload.first_name,
                last_name=payload.last_name,
                timezone=payload.timezone,
            )
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConflictError(EMAIL_REGISTERED) from exc
            await session.refresh(user)
        logger.info("user created", extra={"user_id": user.id})
        return user

    async def authenticate(self, email: str, password: str) -> User:
        async with self._session_factory() as session:
            user = await session.scalar(select(User).where(User.email == email.lower()))

        if user is None:
            # Burn the same hashing cost so unknown emails are not cheaper to probe.
            if self._dummy_hash is None:
                self._dummy_hash = await self._hash("orbit-placeholder")
            await asyncio.to_thread(verify_password, password, self._dummy_hash)
            logger.info("login rejected")
            raise AuthenticationFailed(INVALID_CREDENTIALS)

        matches = await asyncio.to_thread(verify_password, password, user.password)
        if not matches:
            logger.info("login rejected", extra={"user_id": user.id})
            raise AuthenticationFailed(INVALID_CREDENTIALS)
        return user

    async def get_user_profile(self, user_id: int) -> tuple[User, int]:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                raise NotFoundError(USER_NOT_FOUND)
            total = await session.scalar(
                select(func.count(MoodEntry.id)).where(MoodEntry.user_id == user_id)
            )
        return user, int(total or 0)

    async def update_user(self, user_id: int, payload: UserUpdate) -> User:
        fields = payload.present_fields()
        new_hash = await self._hash(payload.password) if "password" in fields else None
        try:
            async with self._session_factory() as session, session.begin():
                user = await session.get(User, user_id)
                if user is None:
                    raise NotFoundError(USER_NOT_FOUND)
                for field in fields:
                    value = getattr(payload, field)
                    if field == "email":
                        taken = await session.scalar(
                            select(User.id).where(User.email == value, User.id != user_id)
                        )
                        if taken is not None:
                            raise ConflictError(EMAIL_IN_USE)
                    elif field == "password":
                        value = new_hash
                    setattr(user, field, value)
                user.updated_at = datetime.utcnow()
        except IntegrityError as exc:
            raise ConflictError(EMAIL_IN_USE) from exc
        logger.info(
            "user updated",
            extra={"user_id": user_id, "extra_fields": {"fields": fields}},
        )
        return user

    async def delete_user(self, user_id: int) -> None:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(delete(User).where(User.id == user_id))
        if result.rowcount == 0:
            raise NotFoundError(USER_NOT_FOUND)
        logger.info("user deleted", extra={"user_id": user_id})

    # -- mood entries ----------------------------------------------------
    async def create_mood(self, payload: MoodCreate) -> MoodEntry:
        async with self._session_factory() as session, session.begin():
            owner = await session.scalar(select(User.id).where(User.id == payload.user_id))
            if owner is None:
                raise NotFoundError(USER_NOT_FOUND)
            mood = MoodEntry(
                user_id=payload.user_id,
                rating=payload.rating,
                stress_level=payload.stress_level,
                anxiety_level=payload.anxiety_level,
                energy_level=payload.energy_level,
                title=payload.title,
                description=payload.description,
                recorded_at=payload.recorded_at,
            )
            session.add(mood)
            await session.flush()
            for component in payload.mood_components or []:
                session.add(
                    MoodComponent(
                        mood_id=mood.id,
                        emotion=component.emotion.lower(),
                        intensity=component.intensity,
                    )
                )
            await session.flush()
            mood_id = mood.id
        logger.info(
            "mood created",
            extra={
                "user_id": payload.user_id,
                "extra_fields": {
                    "mood_id": mood_id,
                    "components": len(payload.mood_components or []),
                },
            },
        )
        return await self.get_mood(mood_id)

    async def get_mood(self, mood_id: int) -> MoodEntry:
        async with self._session_factory() as session:
            mood = await session.scalar(
                select(MoodEntry)
                .options(joinedload(MoodEntry.user), selectinload(MoodEntry.components))
                .where(MoodEntry.id == mood_id)
            )
        if mood is None:
            raise NotFoundError(MOOD_NOT_FOUND)
        return mood

    async def update_mood(self, mood_id: int, payload: MoodUpdate) -> None:
        fields = payload.present_fields()
        async with self._session_factory() as session, session.begin():
            mood = await session.get(MoodEntry, mood_id)
            if mood is None:
                raise NotFoundError(MOOD_NOT_FOUND)
            for field in fields:
                setattr(mood, field, getattr(payload, field))
            if payload.replaces_components:
                await session.execute(
                    delete(MoodComponent).where(MoodComponent.mood_id == mood_id)
                )
                for component in payload.mood_components or []:
                    session.add(
                        MoodComponent(
                            mood_id=mood_id,
                            emotion=component.emotion.lower(),
                            intensity=component.intensity,
                        )
                    )
            mood.updated_at = datetime.utcnow()
        logger.info(
            "mood updated",
            extra={
                "extra_fields": {
                    "mood_id": mood_id,
                    "fields": fields,
                    "components_replaced": payload.replaces_components,
                }
            },
        )

    async def delete_mood(self, mood_id: int) -> None:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(delete(MoodEntry).where(MoodEntry.id == mood_id))
        if result.rowcount == 0:
            raise NotFoundError(MOOD_NOT_FOUND)
        logger.info("mood deleted", extra={"extra_fields": {"mood_id": mood_id}})

    @staticmethod
    def _window_conditions(user_id: int, window: DateWindow | None) -> list[Any]:
        conditions: list[Any] = [MoodEntry.user_id == user_id]
        if window is None:
            return conditions
        if window.start is not None:
            conditions.append(MoodEntry.recorded_at >= window.start)
        if window.end is not None:
            if window.end_exclusive:
                conditions.append(MoodEntry.recorded_at < window.end)
            else:
                conditions.append(MoodEntry.recorded_at <= window.end)
        return conditions

    async def list_moods(
        self,
        user_id: int,
        *,
        pagination: Pagination,
        window: DateWindow | None = None,
    ) -> tuple[list[MoodEntry], int]:
        conditions = self._window_conditions(user_id, window)
        async with self._session_factory() as session:
            total = await session.scalar(select(func.count(MoodEntry.id)).where(*conditions))
            result = await session.execute(
                select(MoodEntry)
                .options(selectinload(MoodEntry.components))
                .where(*conditions)
                .order_by(MoodEntry.recorded_at.desc(), MoodEntry.id.desc())
                .limit(pagination.limit)
                .offset(pagination.offset)
            )
            moods = list(result.scalars().all())
        return moods, int(total or 0)

    # -- statistics ------------------------------------------------------
    async def mood_stats(self, user_id: int, *, window: DateWindow | None = None) -> dict[str, Any]:
        conditions = self._window_conditions(user_id, window)
        async with self._session_factory() as session:
            overall_row = (
                await session.execute(
                    select(
                        func.count(MoodEntry.id),
                        func.avg(MoodEntry.rating),
                        func.avg(MoodEntry.stress_level),
                        func.avg(MoodEntry.anxiety_level),
                        func.avg(MoodEntry.energy_level),
                        func.min(MoodEntry.rating),
                        func.max(MoodEntry.rating),
                        func.min(MoodEntry.stress_level),
                        func.max(MoodEntry.stress_level),
                        func.min(MoodEntry.anxiety_level),
                        func.max(MoodEntry.anxiety_level),
                        func.min(MoodEntry.energy_level),
                        func.max(MoodEntry.energy_level),
                    ).where(*conditions)
                )
            ).one()

            frequency = func.count(MoodComponent.id).label("frequency")
            emotion_rows = (
                await session.execute(
                    select(
                        MoodComponent.emotion,
                        frequency,
                        func.avg(MoodComponent.intensity).label("avg_intensity"),
                    )
                    .join(MoodEntry, MoodComponent.mood_id == MoodEntry.id)
                    .where(*conditions)
                    .group_by(MoodComponent.emotion)
                    .order_by(desc(frequency), MoodComponent.emotion)
                )
            ).all()

            level_rows = (
                await session.execute(
                    select(
                        MoodEntry.recorded_at,
                        MoodEntry.rating,
                        MoodEntry.stress_level,
                        MoodEntry.anxiety_level,
                        MoodEntry.energy_level,
                    ).where(*conditions)
                )
            ).all()

        (
            count,
            avg_rating,
            avg_stress,
            avg_anxiety,
            avg_energy,
            min_rating,
            max_rating,
            min_stress,
            max_stress,
            min_anxiety,
            max_anxiety,
            min_energy,
            max_energy,
        ) = overall_row

        return {
            "overall": {
                "total_entries": int(count or 0),
                "avg_rating": _rounded(avg_rating),
                "avg_stress": _rounded(avg_stress),
                "avg_anxiety": _rounded(avg_anxiety),
                "avg_energy": _rounded(avg_energy),
                "min_rating": min_rating,
                "max_rating": max_rating,
                "min_stress": min_stress,
                "max_stress": max_stress,
                "min_anxiety": min_anxiety,
                "max_anxiety": max_anxiety,
                "min_energy": min_energy,
                "max_energy": max_energy,
            },
            "emotions": [
                {
                    "emotion": row.emotion,
                    "frequency": int(row.frequency),
                    "avg_intensity": _rounded(row.avg_intensity),
                }
                for row in emotion_rows
            ],
            "trends": {"by_day_of_week": self._day_of_week_trends(level_rows)},
            "date_range": {
                "start": window.raw_start if window else None,
                "end": window.raw_end if window else None,
            },
        }

    @staticmethod
    def _day_of_week_trends(rows: Sequence[Any]) -> list[dict[str, Any]]:
        buckets: dict[int, list[Any]] = defaultdict(list)
        for row in rows:
            buckets[_sunday_first(row.recorded_at)].append(row)

        trends: list[dict[str, Any]] = []
        for day_number in sorted(buckets):
            bucket = buckets[day_number]
            trends.append(
                {
                    "day_of_week": DAY_NAMES[day_number],
                    "day_number": day_number,
                    "entries": len(bucket),
                    "avg_rating": _mean([row.rating for row in bucket]),
                    "avg_stress": _mean([row.stress_level for row in bucket]),
                    "avg_anxiety": _mean([row.anxiety_level for row in bucket]),
                    "avg_energy": _mean([row.energy_level for row in bucket]),
                }
            )
        return trends


__all__ = [
    "DAY_NAMES",
    "EMAIL_IN_USE",
    "EMAIL_REGISTERED",
    "MOOD_NOT_FOUND",
    "USER_NOT_FOUND",
    "StorageService",
    "total_pages",
]
