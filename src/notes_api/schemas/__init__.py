from .user import (
    CreateUserDTO,
    PatchUsernameDTO,
    PatchEmailDTO,
    PatchPasswordDTO,
    PublicUserDTO,
    RoleDTO,
)
from .note import CreateNoteDTO, PublicNoteDTO
from .page import Direction, Page, PageRequest, SortOrder
from .error import ErrorResponse

__all__ = [
    "CreateUserDTO",
    "PatchUsernameDTO",
    "PatchEmailDTO",
    "PatchPasswordDTO",
    "PublicUserDTO",
    "RoleDTO",
    "CreateNoteDTO",
    "PublicNoteDTO",
    "Direction",
    "Page",
    "PageRequest",
    "SortOrder",
    "ErrorResponse",
]
