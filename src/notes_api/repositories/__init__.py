"""
Repository layer.

    from notes_api.repositories import UserRepository, NoteRepository, RoleRepository
"""

from .base_repository import BaseRepository
from .user_repository import UserRepository
from .note_repository import NoteRepository
from .role_repository import RoleRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "NoteRepository",
    "RoleRepository",
]
