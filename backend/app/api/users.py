from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Path, Request, status

from ..core.config import Settings
from ..core.errors import AuthenticationFailed
from ..core.validators import MAX_ID
from ..metrics import API_HITS, LOGIN_ATTEMPTS
from ..schemas.common import DeletedResponse, UpdatedResponse
from ..schemas.user import LoginResponse, UserCreateResponse, UserProfile, UserPublic
from ..services.payloads import parse_login, parse_user_create, parse_user_update
from ..services.storage import StorageService
from .deps import get_app_settings, get_storage_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    payload: Any = Body(default=None),
    storage: StorageService = Depends(get_storage_service),
    settings: Settings = Depends(get_app_settings),
) -> UserCreateResponse:
    API_HITS.labels(endpoint="users.create").inc()
    data = parse_user_create(payload, default_timezone=settings.default_timezone)
    user = await storage.create_user(data)
    request.state.user_id = user.id
    return UserCreateResponse(id=user.id)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    payload: Any = Body(default=None),
    storage: StorageService = Depends(get_storage_service),
) -> LoginResponse:
    API_HITS.labels(endpoint="users.login").inc()
    credentials = parse_login(payload)
    try:
        user = await storage.authenticate(credentials.email, credentials.password)
    except AuthenticationFailed:
        LOGIN_ATTEMPTS.labels(result="failure").inc()
        raise
    LOGIN_ATTEMPTS.labels(result="success").inc()
    request.state.user_id = user.id
    return LoginResponse(user=UserPublic.model_validate(user))


@router.get("/{user_id}", response_model=UserProfile)
async def read_user(
    request: Request,
    user_id: int = Path(..., ge=-MAX_ID - 1, le=MAX_ID),
    storage: StorageService = Depends(get_storage_service),
) -> UserProfile:
    API_HITS.labels(endpoint="users.read").inc()
    request.state.user_id = user_id
    user, total_moods = await storage.get_user_profile(user_id)
    profile = UserPublic.model_validate(user)
    return UserProfile(**profile.model_dump(), total_moods=total_moods)


@router.put("/{user_id}", response_model=UpdatedResponse)
async def update_user(
    request: Request,
    user_id: int = Path(..., ge=-MAX_ID - 1, le=MAX_ID),
    payload: Any = Body(default=None),
    storage: StorageService = Depends(get_storage_service),
) -> UpdatedResponse:
    API_HITS.labels(endpoint="users.update").inc()
    request.state.user_id = user_id
    changes = parse_user_update(payload)
    await storage.update_user(user_id, changes)
    return UpdatedResponse(updated=user_id)


@router.delete("/{user_id}", response_model=DeletedResponse)
async def delete_user(
    request: Request,
    user_id: int = Path(..., ge=-MAX_ID - 1, le=MAX_ID),
    storage: StorageService = Depends(get_storage_service),
) -> DeletedResponse:
    API_HITS.labels(endpoint="users.delete").inc()
    request.state.user_id = user_id
    await storage.delete_user(user_id)
    return DeletedResponse(deleted=user_id)
