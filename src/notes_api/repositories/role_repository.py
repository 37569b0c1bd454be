import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.models.role import Role, RoleName
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class RoleRepository(BaseRepository[Role]):

    def __init__(self, db: AsyncSession):
        super().__init__(Role, db)

    async def get_by_name(self, name: RoleName) -> Role | None:
        result = await self.db.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def get_or_create(self, name: RoleName) -> Role:
        """
        Roles are created the first time they are needed.

        The insert runs in a savepoint: when a concurrent transaction created
        the same role first, only the savepoint is rolled back and the row
        committed by the other transaction is returned.
        """
        role = await self.get_by_name(name)
        if role is not None:
            return role

        try:
            async with self.db.begin_nested():
                role = Role(name=name)
                self.db.add(role)
                await self.db.flush()
        except IntegrityError:
            logger.info("repo.role.create_conflict", extra={"role": name.value})
            role = await self.get_by_name(name)
            if role is None:
                raise
            return role

        logger.info("repo.role.created", extra={"role": name.value})
        return role
