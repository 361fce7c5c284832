"""HTTP routers for users and mood entries."""

from .mood import router as mood_router
from .users import router as users_router

__all__ = ["mood_router", "users_router"]
