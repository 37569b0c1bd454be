import pytest

from notes_api.models.role import RoleName
from notes_api.repositories.role_repository import RoleRepository


@pytest.mark.asyncio
class TestRoleRepository:

    async def test_get_or_create_is_idempotent(self, role_repository):
        """
        Behavior:
            - The first call creates the role row, the second returns the same row.
        """
        assert await role_repository.get_by_name(RoleName.ADMIN) is None

        created = await role_repository.get_or_create(RoleName.ADMIN)
        again = await role_repository.get_or_create(RoleName.ADMIN)

        assert created.id == again.id
        assert created.name is RoleName.ADMIN
        assert await role_repository.count() == 1

    async def test_lost_creation_race_returns_the_existing_row(self, session_maker, monkeypatch):
        """
        Behavior:
            - Two transactions both see no role and both insert it; the second
              insert hits the unique name.
            - The loser gets the committed row back and its own transaction stays
              usable.
        """
        async with session_maker() as winner_session:
            winner = await RoleRepository(winner_session).get_or_create(RoleName.USER)
            await winner_session.commit()

        async with session_maker() as loser_session:
            loser_repo = RoleRepository(loser_session)
            real_get_by_name = loser_repo.get_by_name
            lookups = []

            async def stale_first_lookup(name):
                lookups.append(name)
                if len(lookups) == 1:
                    return None
                return await real_get_by_name(name)

            monkeypatch.setattr(loser_repo, "get_by_name", stale_first_lookup)

            role = await loser_repo.get_or_create(RoleName.USER)

            assert role.id == winner.id
            assert len(lookups) == 2

            admin = await loser_repo.get_or_create(RoleName.ADMIN)
            await loser_session.commit()

        async with session_maker() as check_session:
            repo = RoleRepository(check_session)
            assert await repo.count() == 2
            assert (await repo.get_by_name(RoleName.ADMIN)).id == admin.id
