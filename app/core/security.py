"""Password hashing and access tokens for directory principals."""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

settings = get_settings()

# One-way, salted, cost-parameterised; ``verify`` is the only way back.
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: uuid.UUID, expires_delta: timedelta | None = None) -> str:
    """Sign a token naming the principal.

    Only the user id is carried; role and status are looked up on every
    request so changes apply to tokens already handed out.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    claims = {"sub": str(user_id), "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def read_access_token(token: str) -> uuid.UUID:
    """Return the principal id. Raises ``jose.JWTError`` on a bad or expired token."""
    claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    try:
        return uuid.UUID(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise JWTError("Token has no valid subject") from exc
