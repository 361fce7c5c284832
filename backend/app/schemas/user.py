from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Fields a partial update may touch, in the order they are applied.
USER_UPDATE_FIELDS: tuple[str, ...] = (
    "email",
    "password",
    "first_name",
    "last_name",
    "timezone",
)


class UserCreate(BaseModel):
    email: str
    password: str
    first_name: str = Field(..., max_length=500)
    last_name: str = Field(..., max_length=500)
    timezone: str = "UTC"


class UserUpdate(BaseModel):
    """Partial update; only fields in ``model_fields_set`` are applied."""

    email: str | None = None
    password: str | None = None
    first_name: str | None = Field(default=None, max_length=500)
    last_name: str | None = Field(default=None, max_length=500)
    timezone: str | None = None

    def present_fields(self) -> list[str]:
        return [name for name in USER_UPDATE_FIELDS if name in self.model_fields_set]


class LoginRequest(BaseModel):
    email: str
    password: str


class UserPublic(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    timezone: str
    created_at: datetime | None
    updated_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class UserProfile(UserPublic):
    total_moods: int = 0


class UserCreateResponse(BaseModel):
    id: int


class LoginResponse(BaseModel):
    success: bool = True
    user: UserPublic
