"""
Centralized access to all database models.

Importing this package registers every table on `Base.metadata`, which is what
`create_all` (app startup, test fixtures) relies on.

    from notes_api.models import User, Note, Role, RoleName
"""

from .role import Role, RoleName, users_roles
from .user import User
from .note import Note

__all__ = [
    "Role",
    "RoleName",
    "users_roles",
    "User",
    "Note",
]
