"""User model: one record per directory entry.

Teams and management chains are not entities of their own: they are
groupings by equality on ``team_id`` / ``manager_id``, with no integrity
check against other rows.
"""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from app.models.base import TimestampMixin, UTCDateTime, new_uuid

PASSWORD_MIN_LENGTH = 6


class UserRole(StrEnum):
    TEAM_MEMBER = "team_member"
    TEAM_LEAD = "team_lead"
    MANAGER = "manager"
    VIP = "vip"  # executives, HR: read-mostly
    ADMIN = "admin"


class UserStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=new_uuid, primary_key=True)
    email: str = Field(max_length=320, nullable=False, unique=True, index=True)
    password_hash: str = Field(nullable=False)
    first_name: str = Field(max_length=50, nullable=False)
    last_name: str = Field(max_length=50, nullable=False)
    avatar: str | None = Field(default=None)

    role: UserRole = Field(default=UserRole.TEAM_MEMBER)
    status: UserStatus = Field(default=UserStatus.ACTIVE)

    department: str | None = Field(default=None, max_length=255)
    position: str | None = Field(default=None, max_length=255)

    # Weak references: dangling ids are allowed.
    manager_id: uuid.UUID | None = Field(default=None, index=True)
    team_id: uuid.UUID | None = Field(default=None, index=True)

    bio: str | None = Field(default=None)
    phone_number: str | None = Field(default=None, max_length=50)
    is_email_verified: bool = Field(default=False)
    last_login_at: datetime | None = Field(default=None, sa_type=UTCDateTime)


# ── Pydantic schemas ─────────────────────────────────────────

class UserCreate(SQLModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=128)
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    role: UserRole = UserRole.TEAM_MEMBER
    status: UserStatus = UserStatus.ACTIVE
    department: str | None = None
    position: str | None = None
    manager_id: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    bio: str | None = None
    phone_number: str | None = None
    avatar: str | None = None


class UserUpdate(SQLModel):
    """Partial update; only fields present in the request are applied."""

    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=PASSWORD_MIN_LENGTH, max_length=128)
    first_name: str | None = Field(default=None, min_length=2, max_length=50)
    last_name: str | None = Field(default=None, min_length=2, max_length=50)
    role: UserRole | None = None
    status: UserStatus | None = None
    department: str | None = None
    position: str | None = None
    manager_id: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    bio: str | None = None
    phone_number: str | None = None
    avatar: str | None = None


class UserRead(SQLModel):
    """Outbound record. Never carries the password hash.

    Projected records (the vip directory listing) only set the summary
    fields; routes serialise with ``exclude_unset`` so the rest are omitted.
    """

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus
    created_at: datetime
    department: str | None = None
    position: str | None = None
    avatar: str | None = None
    manager_id: uuid.UUID | None = None
    team_id: uuid.UUID | None = None
    bio: str | None = None
    phone_number: str | None = None
    is_email_verified: bool | None = None
    last_login_at: datetime | None = None
    updated_at: datetime | None = None


class StatusChange(SQLModel):
    status: UserStatus


class RoleChange(SQLModel):
    role: UserRole
