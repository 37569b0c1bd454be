from .principal import Principal
from .authorization import is_admin_or_owner, has_role
from .audit import AuditSink, LoggingAuditSink, NullAuditSink
from .passwords import hash_password, verify_password

__all__ = [
    "Principal",
    "is_admin_or_owner",
    "has_role",
    "AuditSink",
    "LoggingAuditSink",
    "NullAuditSink",
    "hash_password",
    "verify_password",
]
