from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Path, Query, Request, status

from ..core.validators import MAX_ID, validate_pagination
from ..db.models import MoodEntry
from ..metrics import API_HITS, MOODS_WRITTEN
from ..schemas.common import DeletedResponse, UpdatedResponse
from ..schemas.mood import (
    EmotionStatsModel,
    MoodComponentModel,
    MoodDetail,
    MoodEntryModel,
    MoodListResponse,
    MoodStatsResponse,
    PaginationModel,
)
from ..services.emotions import calculate_emotion_stats
from ..services.payloads import parse_date_window, parse_mood_create, parse_mood_update
from ..services.storage import StorageService, total_pages
from .deps import get_storage_service

router = APIRouter(prefix="/mood", tags=["mood"])

_MOOD_COLUMNS = (
    "id",
    "user_id",
    "rating",
    "stress_level",
    "anxiety_level",
    "energy_level",
    "title",
    "description",
    "recorded_at",
    "created_at",
    "updated_at",
)


def _mood_fields(mood: MoodEntry) -> dict[str, Any]:
    fields = {name: getattr(mood, name) for name in _MOOD_COLUMNS}
    fields["mood_components"] = [
        MoodComponentModel.model_validate(component) for component in mood.components
    ]
    return fields


def _emotion_stats(mood: MoodEntry) -> EmotionStatsModel:
    return EmotionStatsModel(**calculate_emotion_stats(mood.components).as_dict())


def build_mood_detail(mood: MoodEntry) -> MoodDetail:
    """Single-entry view: owner names, components, stats only when components exist."""

    return MoodDetail(
        **_mood_fields(mood),
        first_name=mood.user.first_name if mood.user else None,
        last_name=mood.user.last_name if mood.user else None,
        emotion_stats=_emotion_stats(mood) if mood.components else None,
    )


def build_mood_entry(mood: MoodEntry) -> MoodEntryModel:
    return MoodEntryModel(**_mood_fields(mood), emotion_stats=_emotion_stats(mood))


@router.post("", response_model=MoodDetail, status_code=status.HTTP_201_CREATED)
async def create_mood(
    request: Request,
    payload: Any = Body(default=None),
    storage: StorageService = Depends(get_storage_service),
) -> MoodDetail:
    API_HITS.labels(endpoint="mood.create").inc()
    data = parse_mood_create(payload)
    request.state.user_id = data.user_id
    mood = await storage.create_mood(data)
    MOODS_WRITTEN.labels(operation="create").inc()
    return build_mood_detail(mood)


@router.get("/user/{user_id}", response_model=MoodListResponse)
async def list_user_moods(
    request: Request,
    user_id: int = Path(..., ge=-MAX_ID - 1, le=MAX_ID),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    storage: StorageService = Depends(get_storage_service),
) -> MoodListResponse:
    API_HITS.labels(endpoint="mood.list").inc()
    request.state.user_id = user_id
    window = parse_date_window(start_date, end_date)
    pagination = validate_pagination(page, limit)
    moods, total = await storage.list_moods(user_id, pagination=pagination, window=window)
    return MoodListResponse(
        moods=[build_mood_entry(mood) for mood in moods],
        pagination=PaginationModel(
            page=pagination.page,
            limit=pagination.limit,
            total=total,
            total_pages=total_pages(total, pagination.limit),
        ),
    )


@router.get("/user/{user_id}/stats", response_model=MoodStatsResponse)
async def user_mood_stats(
    request: Request,
    user_id: int = Path(..., ge=-MAX_ID - 1, le=MAX_ID),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    storage: StorageService = Depends(get_storage_service),
) -> MoodStatsResponse:
    API_HITS.labels(endpoint="mood.stats").inc()
    request.state.user_id = user_id
    window = parse_date_window(start_date, end_date)
    stats = await storage.mood_stats(user_id, window=window)
    return MoodStatsResponse.model_validate(stats)


@router.get("/{mood_id}", response_model=MoodDetail)
async def read_mood(
    mood_id: int = Path(..., ge=-MAX_ID - 1, le=MAX_ID),
    storage: StorageService = Depends(get_storage_service),
) -> MoodDetail:
    API_HITS.labels(endpoint="mood.read").inc()
    mood = await storage.get_mood(mood_id)
    return build_mood_detail(mood)


@router.put("/{mood_id}", response_model=UpdatedResponse)
async def update_mood(
    mood_id: int = Path(..., ge=-MAX_ID - 1, le=MAX_ID),
    payload: Any = Body(default=None),
    storage: StorageService = Depends(get_storage_service),
) -> UpdatedResponse:
    API_HITS.labels(endpoint="mood.update").inc()
    changes = parse_mood_update(payload)
    await storage.update_mood(mood_id, changes)
    MOODS_WRITTEN.labels(operation="update").inc()
    return UpdatedResponse(updated=mood_id)


@router.delete("/{mood_id}", response_model=DeletedResponse)
async def delete_mood(
    mood_id: int = Path(..., ge=-MAX_ID - 1, le=MAX_ID),
    storage: StorageService = Depends(get_storage_service),
) -> DeletedResponse:
    API_HITS.labels(endpoint="mood.delete").inc()
    await storage.delete_mood(mood_id)
    MOODS_WRITTEN.labels(operation="delete").inc()
    return DeletedResponse(deleted=mood_id)
