from .base import service_boundary, ensure_valid_id
from .user_service import UserService
from .note_service import NoteService

__all__ = ["service_boundary", "ensure_valid_id", "UserService", "NoteService"]
