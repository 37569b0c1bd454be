from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notes_api.database.base import Base
from .user import utcnow

if TYPE_CHECKING:
    from .user import User

TITLE_MAX_LENGTH = 255


# ------------------------------
# Note Model
# ------------------------------
class Note(Base):
    """
    SQLAlchemy model representing a note owned by a single user.

    Title and content are never NULL: the service layer stores blank input as "".
    """
    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False, default="")

    # Free text, no length cap
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Set on insert and on every update
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    # Owner; notes go away with their user
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # --- Relationships ---
    user: Mapped["User"] = relationship("User", back_populates="notes", lazy="noload")

    def __repr__(self) -> str:
        return f"<Note(id={self.id!r}, user_id={self.user_id!r}, title={self.title!r})>"
