import pytest

from notes_api.models.role import RoleName
from notes_api.security.authorization import has_role, is_admin_or_owner
from notes_api.security.principal import Principal

USER = frozenset({RoleName.USER})
ADMIN = frozenset({RoleName.ADMIN})


class TestIsAdminOrOwner:

    @pytest.mark.parametrize("target", [1, 2, 999, "7", "abc", None])
    def test_admin_is_always_allowed(self, target):
        assert is_admin_or_owner(Principal(id=1, roles=ADMIN), target) is True

    @pytest.mark.parametrize("target", [7, "7"])
    def test_owner_is_allowed(self, target):
        assert is_admin_or_owner(Principal(id=7, roles=USER), target) is True

    @pytest.mark.parametrize("target", [8, "8", 0, -7])
    def test_other_user_is_denied(self, target):
        assert is_admin_or_owner(Principal(id=7, roles=USER), target) is False

    @pytest.mark.parametrize("target", ["abc", "7x", "", None, 7.5j, True])
    def test_malformed_target_fails_closed(self, target):
        """
        Behavior:
            - Anything that is not an id denies access instead of raising.
              `True` is not treated as the integer 1.
        """
        principal = Principal(id=1, roles=USER)
        assert is_admin_or_owner(principal, target) is False

    def test_principal_without_roles_is_denied(self):
        assert is_admin_or_owner(Principal(id=7, roles=frozenset()), 7) is False

    def test_missing_principal_is_denied(self):
        assert is_admin_or_owner(None, 7) is False

    def test_malformed_principal_is_denied(self):
        class Broken:
            @property
            def roles(self):
                raise RuntimeError("no roles")

        assert is_admin_or_owner(Broken(), 7) is False


class TestHasRole:

    def test_has_role(self):
        assert has_role(Principal(id=1, roles=ADMIN), RoleName.ADMIN) is True
        assert has_role(Principal(id=1, roles=USER), RoleName.ADMIN) is False
        assert has_role(None, RoleName.USER) is False

    def test_principal_from_user(self):
        class FakeUser:
            id = 3
            username = "carol"
            role_names = frozenset({RoleName.USER, RoleName.ADMIN})

        principal = Principal.from_user(FakeUser())
        assert principal.id == 3
        assert principal.is_admin is True
