from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notes_api.database.base import Base
from .role import Role, users_roles

# Avoid circular import issues when using type hints for related models
if TYPE_CHECKING:
    from .note import Note

# Constraint names are part of the error contract: the exception classifier
# matches them to pick "Username already exists" vs "Email already exists".
USERNAME_UNIQUE_NAME = "username_unique"
EMAIL_UNIQUE_NAME = "email_unique"

USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    SQLAlchemy model for User.

    Represents an application user with credentials, a set of roles
    and a one-to-many relationship with notes.
    """
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("username", name=USERNAME_UNIQUE_NAME),
        UniqueConstraint("email", name=EMAIL_UNIQUE_NAME),
    )

    # Surrogate key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(USERNAME_MAX_LENGTH), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    # bcrypt hash, never the plain value
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Set once on insert
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )

    # Refreshed by every patch (set explicitly by the service layer as well)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    # Soft-delete marker, not used by active flows
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # --- Relationships ---

    # Roles are always needed to build a Principal, so load them eagerly.
    roles: Mapped[list[Role]] = relationship(
        Role,
        secondary=users_roles,
        lazy="selectin",
    )

    # passive_deletes: the database cascade removes notes; the ORM never loads the collection to delete it.
    notes: Mapped[list["Note"]] = relationship(
        "Note",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    @property
    def role_names(self) -> frozenset:
        return frozenset(role.name for role in self.roles)

    def __repr__(self) -> str:
        # Helpful for debugging/logging; never include the password hash
        return f"<User(id={self.id!r}, username={self.username!r}, email={self.email!r})>"
