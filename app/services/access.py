"""Access control decisions for directory records.

Pure functions over the acting principal and the target: no I/O and no
mutation. Each operation kind has exactly one decision function, so the
whole role matrix reads top to bottom in this module:

    role         list        read other        update other
    ──────────── ─────────── ───────────────── ─────────────────────────────
    admin        all         full              any
    manager      all         full              team_member / team_lead
    team_lead    own team    own team          team_member in own team
    vip          summary     redacted          never
    team_member  self        never             never

Principals may always read and update their own record. Delete and role
change are admin-only, status change needs manage-users capability, and
none of the three may target the principal itself. A team lead without a
team_id leads nobody and is treated like a team member.

Redaction is an allow-list / deny-list transform over plain dict records
(see ``project`` and ``redact``) so it can be tested without a database.
"""

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

from app.core.exceptions import PermissionDeniedError
from app.models.user import UserRole


class Principal(Protocol):
    """Anything carrying the attributes the rules look at (usually ``User``)."""

    id: uuid.UUID
    role: UserRole
    team_id: uuid.UUID | None
    manager_id: uuid.UUID | None


# Fields a vip sees in the directory listing.
SUMMARY_FIELDS = frozenset({
    "id",
    "first_name",
    "last_name",
    "email",
    "role",
    "status",
    "department",
    "position",
    "created_at",
})

# Fields never shown to a vip reading someone else's record.
SENSITIVE_FIELDS = frozenset({"password_hash"})

# Fields a vip may not touch, even on their own record.
VIP_PROTECTED_FIELDS = frozenset({"role", "status", "manager_id", "team_id"})

# Fields only the dedicated status / role operations may change.
DEDICATED_FIELDS = frozenset({"role", "status"})


# ── Capabilities ─────────────────────────────────────────────

def is_admin(principal: Principal) -> bool:
    return principal.role == UserRole.ADMIN


def is_manager(principal: Principal) -> bool:
    return principal.role == UserRole.MANAGER


def is_team_lead(principal: Principal) -> bool:
    return principal.role == UserRole.TEAM_LEAD


def is_vip(principal: Principal) -> bool:
    return principal.role == UserRole.VIP


def can_manage_users(principal: Principal) -> bool:
    return is_admin(principal) or is_manager(principal)


def can_manage_team(principal: Principal) -> bool:
    return can_manage_users(principal) or is_team_lead(principal)


def same_team(principal: Principal, target: Principal) -> bool:
    """Both belong to the same team. Having no team is not a team."""
    return principal.team_id is not None and target.team_id == principal.team_id


# ── Decisions ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Decision:
    """Outcome of a rule: truthy when allowed, with a reason when not."""

    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def deny(reason: str) -> Decision:
    return Decision(False, reason)


def require(decision: Decision) -> None:
    """Raise ``PermissionDeniedError`` unless the decision allows."""
    if not decision:
        raise PermissionDeniedError(decision.reason)


class ListScope(StrEnum):
    ALL = "all"
    SUMMARY = "summary"
    TEAM = "team"
    SELF = "self"


class ReadAccess(StrEnum):
    FULL = "full"
    REDACTED = "redacted"
    DENIED = "denied"


def list_scope(principal: Principal) -> ListScope:
    if is_vip(principal):
        return ListScope.SUMMARY
    if can_manage_users(principal):
        return ListScope.ALL
    if is_team_lead(principal) and principal.team_id is not None:
        return ListScope.TEAM
    return ListScope.SELF


def read_access(principal: Principal, target: Principal) -> ReadAccess:
    if principal.id == target.id:
        return ReadAccess.FULL
    if is_vip(principal):
        return ReadAccess.REDACTED
    if can_manage_users(principal):
        return ReadAccess.FULL
    if is_team_lead(principal) and same_team(principal, target):
        return ReadAccess.FULL
    return ReadAccess.DENIED


def check_read(principal: Principal, target: Principal) -> Decision:
    if read_access(principal, target) is ReadAccess.DENIED:
        return deny("Insufficient permissions to view this user")
    return ALLOW


def check_create(principal: Principal) -> Decision:
    if not is_admin(principal):
        return deny("Only admins can create users")
    return ALLOW


def check_update(principal: Principal, target: Principal) -> Decision:
    if principal.id == target.id:
        return ALLOW
    if is_vip(principal):
        return deny("VIP users can only update their own profile")
    if is_admin(principal):
        return ALLOW
    if is_manager(principal):
        if target.role in (UserRole.TEAM_MEMBER, UserRole.TEAM_LEAD):
            return ALLOW
        return deny("Managers can only update team members and team leads")
    if is_team_lead(principal):
        if same_team(principal, target) and target.role == UserRole.TEAM_MEMBER:
            return ALLOW
        return deny("Team leads can only update members of their own team")
    return deny("Insufficient permissions to update this user")


def check_delete(principal: Principal, target_id: uuid.UUID) -> Decision:
    if not is_admin(principal):
        return deny("Only admins can delete users")
    if principal.id == target_id:
        return deny("Cannot delete your own account")
    return ALLOW


def check_change_status(principal: Principal, target_id: uuid.UUID) -> Decision:
    if not can_manage_users(principal):
        return deny("Insufficient permissions to change user status")
    if principal.id == target_id:
        return deny("Cannot change your own status")
    return ALLOW


def check_change_role(principal: Principal, target_id: uuid.UUID) -> Decision:
    if not is_admin(principal):
        return deny("Only admins can change user roles")
    if principal.id == target_id:
        return deny("Cannot change your own role")
    return ALLOW


def check_team_access(principal: Principal, team_id: uuid.UUID) -> Decision:
    if is_admin(principal) or is_vip(principal) or is_manager(principal):
        return ALLOW
    if is_team_lead(principal) and principal.team_id == team_id:
        return ALLOW
    return deny("Insufficient permissions to access this team")


def check_subordinates_access(principal: Principal, manager_id: uuid.UUID) -> Decision:
    if is_admin(principal) or is_vip(principal) or is_manager(principal):
        return ALLOW
    # Anyone may list the other reports of their own manager.
    if principal.manager_id == manager_id:
        return ALLOW
    return deny("Insufficient permissions to access this manager's subordinates")


# ── Field transforms ─────────────────────────────────────────

def project(record: Mapping[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    """Keep only ``fields`` (allow-list)."""
    keep = set(fields)
    return {k: v for k, v in record.items() if k in keep}


def redact(record: Mapping[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    """Drop ``fields`` (deny-list)."""
    drop = set(fields)
    return {k: v for k, v in record.items() if k not in drop}


def shape_read(record: Mapping[str, Any], access: ReadAccess) -> dict[str, Any]:
    if access is ReadAccess.REDACTED:
        return redact(record, SENSITIVE_FIELDS)
    return dict(record)


def strip_update(principal: Principal, patch: Mapping[str, Any]) -> dict[str, Any]:
    """Remove the fields a generic update may not carry.

    Role and status only change through their dedicated operations; a vip
    additionally cannot move themselves between teams or managers. Stripped
    fields are dropped silently, never rejected.
    """
    cleaned = redact(patch, DEDICATED_FIELDS)
    if is_vip(principal):
        cleaned = redact(cleaned, VIP_PROTECTED_FIELDS)
    return cleaned
