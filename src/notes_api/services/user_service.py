"""
User service: account creation, profile patches, deletion and the admin listing.

Every public coroutine is one transaction (see `service_boundary`) and raises
only `UserServiceError` to its caller.
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
from notes_api.models.role import RoleName
from notes_api.models.user import PASSWORD_MIN_LENGTH, User, utcnow
from notes_api.repositories.role_repository import RoleRepository
from notes_api.repositories.user_repository import UserRepository
from notes_api.schemas.page import Page, PageRequest
from notes_api.schemas.user import (
    CreateUserDTO,
    PatchEmailDTO,
    PatchPasswordDTO,
    PatchUsernameDTO,
    PublicUserDTO,
)
from notes_api.security.passwords import hash_password, verify_password
from notes_api.security.principal import Principal
from .base import ensure_valid_id, service_boundary

logger = logging.getLogger(__name__)

FAMILY = EntityFamily.USER


class UserService:

    def __init__(self, db: AsyncSession, classifier: ExceptionClassifier | None = None):
        self.db = db
        self.classifier = classifier or ExceptionClassifier()
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)

    def _boundary(self, operation: str):
        return service_boundary(self.db, self.classifier, FAMILY, f"user.{operation}")

    # =================================================================================================================
    # Create / read
    # =================================================================================================================

    async def create(self, dto: CreateUserDTO | dict | None, default_role: RoleName = RoleName.USER) -> int:
        """
        Create a user holding `default_role` and return its id.

        Raises:
            UserServiceError: USER_DTO_NULL, VALIDATION, PASSWORD_TOO_SHORT,
                USERNAME_TAKEN or EMAIL_TAKEN.
        """
        async with self._boundary("create"):
            dto = self._require_dto(dto, CreateUserDTO)
            self._check_password(dto.password)

            role = await self.roles.get_or_create(default_role)
            user = await self.users.create(
                username=dto.username,
                email=dto.email,
                password=hash_password(dto.password),
                roles=[role],
            )
            user_id = user.id

        logger.info("service.user.created", extra={"user_id": user_id, "role": default_role.value})
        return user_id

    async def get_by_id(self, user_id: int) -> PublicUserDTO:
        async with self._boundary("get_by_id"):
            user = await self._get_user(user_id)
            return PublicUserDTO.model_validate(user)

    async def get_page(self, page_request: PageRequest | None) -> Page[PublicUserDTO]:
        """Admin listing. Authorization is checked by the caller (route guard)."""
        async with self._boundary("get_page"):
            if page_request is None:
                raise PageRequestMissingError("UserService.get_page")
            users, total = await self.users.get_page(page_request)
            content = [PublicUserDTO.model_validate(u) for u in users]
            return Page[PublicUserDTO].build(content, page_request, total)

    # =================================================================================================================
    # Patches
    # =================================================================================================================

    async def patch_username_by_id(self, user_id: int, dto: PatchUsernameDTO | dict | None) -> None:
        async with self._boundary("patch_username"):
            ensure_valid_id(user_id, FAMILY)
            dto = self._require_dto(dto, PatchUsernameDTO)
            user = await self._get_user(user_id)
            await self.users.update(user, username=dto.username, updated_at=utcnow())
        logger.info("service.user.username_changed", extra={"user_id": user_id})

    async def patch_email_by_id(self, user_id: int, dto: PatchEmailDTO | dict | None) -> None:
        async with self._boundary("patch_email"):
            ensure_valid_id(user_id, FAMILY)
            dto = self._require_dto(dto, PatchEmailDTO)
            user = await self._get_user(user_id)
            await self.users.update(user, email=dto.email, updated_at=utcnow())
        logger.info("service.user.email_changed", extra={"user_id": user_id})

    async def patch_password_by_id(self, user_id: int, dto: PatchPasswordDTO | dict | None) -> None:
        async with self._boundary("patch_password"):
            ensure_valid_id(user_id, FAMILY)
            dto = self._require_dto(dto, PatchPasswordDTO)
            self._check_password(dto.password)
            user = await self._get_user(user_id)
            await self.users.update(user, password=hash_password(dto.password), updated_at=utcnow())
        logger.info("service.user.password_changed", extra={"user_id": user_id})

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def delete_by_id(self, user_id: int) -> None:
        """
        Delete the user and all of its notes in one transaction.
        """
        async with self._boundary("delete"):
            user = await self._get_user(user_id)
            deleted_notes = await self.users.delete_with_notes(user)
        logger.info("service.user.deleted", extra={"user_id": user_id, "deleted_notes": deleted_notes})

    # =================================================================================================================
    # Authentication
    # =================================================================================================================

    async def authenticate(self, username: str, password: str) -> Principal | None:
        """
        Return the Principal for valid credentials, None otherwise.
        Read-only: nothing is committed.
        """
        if not username or not password:
            return None
        user = await self.users.get_by_username(username)
        if user is None or user.deleted_at is not None:
            return None
        if not verify_password(password, user.password):
            return None
        return Principal.from_user(user)

    # =================================================================================================================
    # Helpers
    # =================================================================================================================

    async def _get_user(self, user_id: int) -> User:
        ensure_valid_id(user_id, FAMILY)
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise make_error(FAMILY, ErrorKind.USER_NOT_FOUND)
        return user

    @staticmethod
    def _require_dto(dto, schema):
        # dicts are validated here; pydantic errors are classified as 400s
        if dto is None:
            raise make_error(FAMILY, ErrorKind.USER_DTO_NULL)
        if isinstance(dto, dict):
            return schema.model_validate(dto)
        return dto

    @staticmethod
    def _check_password(password: str | None) -> None:
        if password is None or len(password) < PASSWORD_MIN_LENGTH:
            raise make_error(FAMILY, ErrorKind.PASSWORD_TOO_SHORT)
