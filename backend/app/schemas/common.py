from __future__ import annotations

from pydantic import BaseModel


class UpdatedResponse(BaseModel):
    success: bool = True
    updated: int


class DeletedResponse(BaseModel):
    success: bool = True
    deleted: int
