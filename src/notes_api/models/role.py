from enum import Enum as PyEnum

from sqlalchemy import Column, ForeignKey, Integer, Table
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from notes_api.database.base import Base


# ------------------------------
# Enum to define authorization roles
# ------------------------------
class RoleName(str, PyEnum):
    """Roles a user can hold. Values are what is stored in `roles.name`."""
    USER = "ROLE_USER"
    ADMIN = "ROLE_ADMIN"


# ------------------------------
# users <-> roles association table
# ------------------------------
# Deleting a user removes its link rows only; the role rows themselves are shared and kept.
users_roles = Table(
    "users_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """
    SQLAlchemy model for a role.

    Rows are created lazily (see RoleRepository.get_or_create) the first time a
    user is given that role, and are never removed by user or note operations.
    """
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[RoleName] = mapped_column(
        SQLEnum(
            RoleName,
            native_enum=False,
            length=20,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        unique=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id!r}, name={self.name!r})>"
