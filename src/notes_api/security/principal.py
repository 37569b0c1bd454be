from dataclasses import dataclass, field

from notes_api.models.role import RoleName


@dataclass(frozen=True)
class Principal:
    """
    The authenticated caller: user id plus the roles it holds.

    Built by the authentication dependency from the `users` row and passed
    explicitly to authorization checks.
    """
    id: int
    username: str = ""
    roles: frozenset[RoleName] = field(default_factory=frozenset)

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(id=user.id, username=user.username, roles=frozenset(user.role_names))

    @property
    def is_admin(self) -> bool:
        return RoleName.ADMIN in self.roles
