from functools import lru_cache

from passlib.context import CryptContext

from notes_api.config import get_settings


@lru_cache()
def get_password_context() -> CryptContext:
    # Rounds come from settings so tests can use a cheap cost factor.
    settings = get_settings()
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def hash_password(plain: str) -> str:
    return get_password_context().hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """False for any malformed hash instead of raising."""
    try:
        return get_password_context().verify(plain, hashed)
    except (ValueError, TypeError):
        return False
