"""
Note service: owner-scoped note CRUD.

Argument checks run in a fixed order, all before the first query:
ids, then the dto, then the title length. Only then is the owner looked up.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.exceptions.classifier import ExceptionClassifier
from notes_api.exceptions.errors import (
    EntityFamily,
    ErrorKind,
    PageRequestMissingError,
    make_error,
)
from notes_api.models.note import TITLE_MAX_LENGTH, Note
from notes_api.models.user import utcnow
from notes_api.repositories.note_repository import NoteRepository
from notes_api.repositories.user_repository import UserRepository
from notes_api.schemas.note import CreateNoteDTO, PublicNoteDTO
from notes_api.schemas.page import Page, PageRequest
from .base import ensure_valid_id, service_boundary

logger = logging.getLogger(__name__)

FAMILY = EntityFamily.NOTE


def normalize_text(value: str | None) -> str:
    """Blank or missing title/content is stored as an empty string."""
    if value is None or not value.strip():
        return ""
    return value


class NoteService:

    def __init__(self, db: AsyncSession, classifier: ExceptionClassifier | None = None):
        self.db = db
        self.classifier = classifier or ExceptionClassifier()
        self.notes = NoteRepository(db)
        self.users = UserRepository(db)

    def _boundary(self, operation: str):
        return service_boundary(self.db, self.classifier, FAMILY, f"note.{operation}")

    # =================================================================================================================
    # Create / read
    # =================================================================================================================

    async def create(self, dto: CreateNoteDTO | dict | None, owner_id: int) -> int:
        """
        Create a note for `owner_id` and return its id.

        Raises:
            NoteServiceError: INVALID_ID, NOTE_DTO_NULL, TITLE_TOO_LONG, USER_NOT_FOUND.
        """
        async with self._boundary("create"):
            ensure_valid_id(owner_id, FAMILY)
            title, content = self._normalized_fields(dto)
            await self._require_owner(owner_id)

            note = await self.notes.create(
                title=title, content=content, user_id=owner_id, updated_at=utcnow()
            )
            note_id = note.id

        logger.info("service.note.created", extra={"note_id": note_id, "user_id": owner_id})
        return note_id

    async def get(self, note_id: int, owner_id: int) -> PublicNoteDTO:
        async with self._boundary("get"):
            note = await self._get_owned(note_id, owner_id)
            return PublicNoteDTO.model_validate(note)

    async def get_page(self, page_request: PageRequest | None, owner_id: int) -> Page[PublicNoteDTO]:
        async with self._boundary("get_page"):
            if page_request is None:
                raise PageRequestMissingError("NoteService.get_page")
            ensure_valid_id(owner_id, FAMILY)
            await self._require_owner(owner_id)
            notes, total = await self.notes.get_page_by_user(page_request, owner_id)
            content = [PublicNoteDTO.model_validate(n) for n in notes]
            return Page[PublicNoteDTO].build(content, page_request, total)

    # =================================================================================================================
    # Put (upsert)
    # =================================================================================================================

    async def put(self, note_id: int, dto: CreateNoteDTO | dict | None, owner_id: int) -> None:
        """
        Create or replace the note `note_id` of `owner_id`.

        - existing (note_id, owner_id): title, content and updated_at are replaced;
          id and owner are kept.
        - no note with that id: a new note is created with exactly that id.
        - the id belongs to another user: ACCESS_DENIED.
        """
        async with self._boundary("put"):
            ensure_valid_id(note_id, FAMILY)
            ensure_valid_id(owner_id, FAMILY)
            title, content = self._normalized_fields(dto)
            await self._require_owner(owner_id)

            existing = await self.notes.get_by_id(note_id)
            if existing is not None and existing.user_id != owner_id:
                raise make_error(FAMILY, ErrorKind.ACCESS_DENIED)

            if existing is None:
                await self.notes.create_with_id(
                    note_id, title=title, content=content, user_id=owner_id, updated_at=utcnow()
                )
                created = True
            else:
                await self.notes.update(existing, title=title, content=content, updated_at=utcnow())
                created = False

        logger.info(
            "service.note.put",
            extra={"note_id": note_id, "user_id": owner_id, "was_created": created},
        )

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def delete_by_id(self, note_id: int, owner_id: int) -> None:
        async with self._boundary("delete"):
            note = await self._get_owned(note_id, owner_id)
            await self.notes.delete(note)
        logger.info("service.note.deleted", extra={"note_id": note_id, "user_id": owner_id})

    async def delete_all(self) -> int:
        """Administrative: remove every note. Returns the number deleted."""
        async with self._boundary("delete_all"):
            deleted = await self.notes.delete_all()
        return deleted

    # =================================================================================================================
    # Helpers
    # =================================================================================================================

    async def _get_owned(self, note_id: int, owner_id: int) -> Note:
        ensure_valid_id(note_id, FAMILY)
        ensure_valid_id(owner_id, FAMILY)
        await self._require_owner(owner_id)
        note = await self.notes.get_by_id_and_user(note_id, owner_id)
        if note is None:
            raise make_error(FAMILY, ErrorKind.NOTE_NOT_FOUND)
        return note

    async def _require_owner(self, owner_id: int) -> None:
        if not await self.users.exists_by_id(owner_id):
            raise make_error(FAMILY, ErrorKind.USER_NOT_FOUND)

    @staticmethod
    def _normalized_fields(dto: CreateNoteDTO | dict | None) -> tuple[str, str]:
        if dto is None:
            raise make_error(FAMILY, ErrorKind.NOTE_DTO_NULL)
        if isinstance(dto, dict):
            dto = CreateNoteDTO.model_validate(dto)

        title = normalize_text(dto.title)
        if len(title) > TITLE_MAX_LENGTH:
            raise make_error(FAMILY, ErrorKind.TITLE_TOO_LONG)
        return title, normalize_text(dto.content)
