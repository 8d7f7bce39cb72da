"""Import all models so SQLModel.metadata picks them up."""

from app.models.user import (
    RoleChange,
    StatusChange,
    User,
    UserCreate,
    UserRead,
    UserRole,
    UserStatus,
    UserUpdate,
)

__all__ = [
    "RoleChange",
    "StatusChange",
    "User",
    "UserCreate",
    "UserRead",
    "UserRole",
    "UserStatus",
    "UserUpdate",
]
