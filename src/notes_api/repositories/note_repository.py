"""
Note repository: owner-scoped note queries.

Every lookup that takes a note id also takes the owner's id, so a caller can
never reach another user's note through this repository by id alone.
"""

import logging

from sqlalchemy import delete, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.exceptions.base import RepositoryError
from notes_api.exceptions.mapper import db_error_handler
from notes_api.models.note import Note
from notes_api.schemas.page import PageRequest
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class NoteRepository(BaseRepository[Note]):

    sortable_fields = frozenset({"id", "title", "content", "updated_at"})

    def __init__(self, db: AsyncSession):
        super().__init__(Note, db)

    async def get_by_id_and_user(self, note_id: int, user_id: int) -> Note | None:
        try:
            result = await self.db.execute(
                select(Note).where(Note.id == note_id, Note.user_id == user_id)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Error retrieving Note {note_id} for user {user_id}: {e}")
            raise RepositoryError("Failed to retrieve Note") from e

    async def exists_by_id_and_user(self, note_id: int, user_id: int) -> bool:
        return await self.exists(Note.id == note_id, Note.user_id == user_id)

    async def get_page_by_user(self, page_request: PageRequest, user_id: int) -> tuple[list[Note], int]:
        return await self.get_page(page_request, Note.user_id == user_id)

    async def count_by_user(self, user_id: int) -> int:
        return await self.count(Note.user_id == user_id)

    async def create_with_id(self, note_id: int, **fields) -> Note:
        """
        Insert a note with a caller-chosen primary key (PUT on a missing id).

        On Postgres the id sequence is moved past the inserted value so later
        autoincrement inserts do not collide with it.
        """
        note = await self.create(id=note_id, **fields)
        if self.db.get_bind().dialect.name == "postgresql":
            async with db_error_handler(self.db, self.model_name):
                await self.db.execute(
                    text(
                        "SELECT setval(pg_get_serial_sequence('notes', 'id'), "
                        "GREATEST((SELECT MAX(id) FROM notes), 1))"
                    )
                )
        return note

    async def delete_all(self) -> int:
        """Delete every note of every user. Returns the number of rows removed."""
        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(delete(Note))
            await self.db.flush()
        deleted = result.rowcount or 0
        logger.warning("repo.note.deleted_all", extra={"deleted": deleted})
        return deleted
