"""
Ownership / role authorization.

Both checks are fail-closed: any problem reading the principal or the target
id results in False, never an exception.
"""

import logging

from notes_api.models.role import RoleName
from .principal import Principal

logger = logging.getLogger(__name__)


def has_role(principal: Principal | None, role: RoleName) -> bool:
    try:
        return role in principal.roles
    except Exception as exc:
        logger.debug("authz.role_check_failed", extra={"role": role.value, "error": type(exc).__name__})
        return False


def is_admin_or_owner(principal: Principal | None, target_id: int | str | None) -> bool:
    """
    True iff the caller is an admin, or a user whose id equals `target_id`.

    `target_id` may be the raw path segment; it is parsed as an int and
    anything non-numeric is denied.
    """
    try:
        roles = principal.roles
        if RoleName.ADMIN in roles:
            return True
        if RoleName.USER not in roles:
            return False
        if isinstance(target_id, bool):
            return False
        return int(principal.id) == int(target_id)
    except Exception as exc:
        logger.debug(
            "authz.ownership_check_failed",
            extra={"target_id": repr(target_id), "error": type(exc).__name__},
        )
        return False
