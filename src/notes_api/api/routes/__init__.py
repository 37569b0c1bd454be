from .users import router as users_router
from .notes import router as notes_router

__all__ = ["users_router", "notes_router"]
