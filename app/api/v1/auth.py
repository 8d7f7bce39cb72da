"""Authentication endpoints: first-admin bootstrap and login."""

from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr, Field

from app.api.deps import Directory
from app.core.security import create_access_token, verify_password
from app.models.user import PASSWORD_MIN_LENGTH, UserRead, UserStatus

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class BootstrapRequest(BaseModel):
    """The first admin of an empty directory."""
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=128)
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


# ── Routes ───────────────────────────────────────────────────

@router.post(
    "/bootstrap",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create the first admin",
)
async def bootstrap(body: BootstrapRequest, directory: Directory) -> dict[str, Any]:
    """Create the initial admin account.

    This is the only unauthenticated write endpoint and it refuses (409)
    once the directory holds any user.
    """
    return await directory.bootstrap(body.model_dump())


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, directory: Directory) -> LoginResponse:
    """Authenticate with email + password, receive a JWT."""
    user = await directory.find_by_email(body.email)

    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    await directory.update_last_login(user.id)
    token = create_access_token(user.id)

    return LoginResponse(
        access_token=token,
        user=UserRead.model_validate(user.model_dump()),
    )
