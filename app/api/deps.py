"""FastAPI dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.security import read_access_token
from app.models.user import User, UserStatus
from app.services.directory import UserDirectory
from app.services.user_store import UserRepository

bearer_scheme = HTTPBearer()


async def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> User:
    """Resolve a bearer JWT to the acting user's full record.

    The role is read from the row, not the token, so role changes apply
    to tokens issued before them.
    """
    try:
        user_id = read_access_token(credentials.credentials)
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from exc

    user = await session.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token owner no longer exists",
        )
    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )
    return user


def get_directory(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> UserDirectory:
    return UserDirectory(UserRepository(session))


# Typed shorthand for use in route signatures
Principal = Annotated[User, Depends(get_principal)]
Directory = Annotated[UserDirectory, Depends(get_directory)]
