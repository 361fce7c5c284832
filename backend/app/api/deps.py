from __future__ import annotations

from fastapi import Request

from ..core.config import Settings
from ..services.storage import StorageService


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
