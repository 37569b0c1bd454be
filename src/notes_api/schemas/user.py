"""
User request/response schemas.

Validation messages are part of the API: the first failing field's message is
what the client receives in the error body.
"""

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from notes_api.models.role import RoleName
from notes_api.models.user import PASSWORD_MIN_LENGTH, USERNAME_MAX_LENGTH


def check_username(value: str | None) -> str:
    if value is None or not str(value).strip():
        raise PydanticCustomError("username_blank", "Username mustn't be blank")
    if len(value) > USERNAME_MAX_LENGTH:
        raise PydanticCustomError("username_too_long", "Username must be less than 20 characters")
    return value


def check_email(value: str | None) -> str:
    if value is None or not str(value).strip():
        raise PydanticCustomError("email_required", "Email is required")
    try:
        # syntax only; no DNS lookups
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email_invalid", "Email is invalid")
    return value


def check_password(value: str | None) -> str:
    if value is None or len(value) < PASSWORD_MIN_LENGTH:
        raise PydanticCustomError("password_too_short", "Password must be at least 8 characters")
    return value


class CreateUserDTO(BaseModel):
    username: str | None = Field(default=None, validate_default=True)
    email: str | None = Field(default=None, validate_default=True)
    password: str | None = Field(default=None, validate_default=True)

    @field_validator("username")
    @classmethod
    def username_rules(cls, v: str | None) -> str:
        return check_username(v)

    @field_validator("email")
    @classmethod
    def email_rules(cls, v: str | None) -> str:
        return check_email(v)

    @field_validator("password")
    @classmethod
    def password_rules(cls, v: str | None) -> str:
        return check_password(v)


class PatchUsernameDTO(BaseModel):
    username: str | None = Field(default=None, validate_default=True)

    @field_validator("username")
    @classmethod
    def username_rules(cls, v: str | None) -> str:
        return check_username(v)


class PatchEmailDTO(BaseModel):
    email: str | None = Field(default=None, validate_default=True)

    @field_validator("email")
    @classmethod
    def email_rules(cls, v: str | None) -> str:
        return check_email(v)


class PatchPasswordDTO(BaseModel):
    password: str | None = Field(default=None, validate_default=True)

    @field_validator("password")
    @classmethod
    def password_rules(cls, v: str | None) -> str:
        return check_password(v)


class RoleDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: RoleName


class PublicUserDTO(BaseModel):
    """What clients see of a user: never the password hash."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: datetime
    updated_at: datetime
    roles: list[RoleDTO] = []
