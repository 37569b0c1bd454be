"""
User repository for handling user-specific database operations.

Extends BaseRepository with lookups by username/email and the atomic
"delete user with notes" operation.
"""

import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.exceptions.mapper import db_error_handler
from notes_api.models.note import Note
from notes_api.models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for User entity operations.
    """

    # never sort by the password hash
    sortable_fields = frozenset({"id", "username", "email", "created_at", "updated_at"})

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    # =================================================================================================================
    # Lookups
    # =================================================================================================================

    async def get_by_username(self, username: str) -> User | None:
        """
        Retrieve a user by exact (case-sensitive) username.

        Args:
            username: The username to search for

        Returns:
            The user if found, None otherwise
        """
        return await self.find_by_field("username", username)

    async def get_by_email(self, email: str) -> User | None:
        return await self.find_by_field("email", email)

    async def exists_by_id(self, user_id: int) -> bool:
        return await self.exists(User.id == user_id)

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def delete_with_notes(self, user: User) -> int:
        """
        Delete a user and every note it owns in the current transaction.

        The notes are removed explicitly (not only through ON DELETE CASCADE)
        so the result is the same on databases where foreign keys are not
        enforced. Nothing is committed here: if the surrounding transaction
        rolls back, both the user and its notes survive.

        Args:
            user: a persistent User instance

        Returns:
            The number of notes deleted.
        """
        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(delete(Note).where(Note.user_id == user.id))
            deleted_notes = result.rowcount or 0
            await self.db.delete(user)
            await self.db.flush()

        logger.info(
            "repo.user.deleted_with_notes",
            extra={"user_id": user.id, "deleted_notes": deleted_notes},
        )
        return deleted_notes
