"""Unit tests for the access rules: no database involved."""

import uuid

import pytest

from app.core.exceptions import PermissionDeniedError
from app.models.user import User, UserRole
from app.services import access
from app.services.access import ListScope, ReadAccess

TEAM_A = uuid.uuid4()
TEAM_B = uuid.uuid4()
BOSS = uuid.uuid4()


def _user(role: UserRole, team_id: uuid.UUID | None = None, manager_id: uuid.UUID | None = None) -> User:
    return User(
        id=uuid.uuid4(),
        email=f"{uuid.uuid4().hex[:8]}@example.com",
        password_hash="x",
        first_name="Ann",
        last_name="Example",
        role=role,
        team_id=team_id,
        manager_id=manager_id,
    )


# ── Listing / reading ────────────────────────────────────────

@pytest.mark.parametrize(
    ("role", "scope"),
    [
        (UserRole.ADMIN, ListScope.ALL),
        (UserRole.MANAGER, ListScope.ALL),
        (UserRole.TEAM_LEAD, ListScope.TEAM),
        (UserRole.VIP, ListScope.SUMMARY),
        (UserRole.TEAM_MEMBER, ListScope.SELF),
    ],
)
def test_list_scope_per_role(role, scope):
    assert access.list_scope(_user(role, team_id=TEAM_A)) is scope


@pytest.mark.parametrize("role", list(UserRole))
def test_self_read_and_update_always_allowed(role):
    me = _user(role)
    assert access.read_access(me, me) is ReadAccess.FULL
    assert access.check_update(me, me)


def test_read_other_per_role():
    target = _user(UserRole.TEAM_MEMBER, team_id=TEAM_A)
    assert access.read_access(_user(UserRole.ADMIN), target) is ReadAccess.FULL
    assert access.read_access(_user(UserRole.MANAGER), target) is ReadAccess.FULL
    assert access.read_access(_user(UserRole.VIP), target) is ReadAccess.REDACTED
    assert access.read_access(_user(UserRole.TEAM_LEAD, team_id=TEAM_A), target) is ReadAccess.FULL
    assert access.read_access(_user(UserRole.TEAM_LEAD, team_id=TEAM_B), target) is ReadAccess.DENIED
    assert access.read_access(_user(UserRole.TEAM_MEMBER, team_id=TEAM_A), target) is ReadAccess.DENIED


def test_check_read_reports_reason():
    decision = access.check_read(_user(UserRole.TEAM_MEMBER), _user(UserRole.TEAM_MEMBER))
    assert not decision
    assert "view" in decision.reason


# ── Update ───────────────────────────────────────────────────

@pytest.mark.parametrize(
    ("target_role", "allowed"),
    [
        (UserRole.TEAM_MEMBER, True),
        (UserRole.TEAM_LEAD, True),
        (UserRole.MANAGER, False),
        (UserRole.ADMIN, False),
        (UserRole.VIP, False),
    ],
)
def test_manager_update_limited_to_members_and_leads(target_role, allowed):
    assert bool(access.check_update(_user(UserRole.MANAGER), _user(target_role))) is allowed


@pytest.mark.parametrize(
    ("target_team", "target_role", "allowed"),
    [
        (TEAM_A, UserRole.TEAM_MEMBER, True),
        (TEAM_A, UserRole.TEAM_LEAD, False),
        (TEAM_B, UserRole.TEAM_MEMBER, False),
        (None, UserRole.TEAM_MEMBER, False),
    ],
)
def test_team_lead_update_needs_same_team_and_member_role(target_team, target_role, allowed):
    lead = _user(UserRole.TEAM_LEAD, team_id=TEAM_A)
    target = _user(target_role, team_id=target_team)
    assert bool(access.check_update(lead, target)) is allowed


def test_admin_updates_anyone():
    admin = _user(UserRole.ADMIN)
    for role in UserRole:
        assert access.check_update(admin, _user(role))


def test_vip_and_member_cannot_update_others():
    target = _user(UserRole.TEAM_MEMBER)
    assert not access.check_update(_user(UserRole.VIP), target)
    assert not access.check_update(_user(UserRole.TEAM_MEMBER), target)


# ── Delete / status / role ──────────────────────────────────

def test_delete_admin_only_and_never_self():
    admin = _user(UserRole.ADMIN)
    assert access.check_delete(admin, uuid.uuid4())
    assert access.check_delete(admin, admin.id).reason == "Cannot delete your own account"
    assert not access.check_delete(_user(UserRole.MANAGER), uuid.uuid4())


@pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.MANAGER])
def test_status_change_needs_manage_capability_and_not_self(role):
    actor = _user(role)
    assert access.check_change_status(actor, uuid.uuid4())
    assert not access.check_change_status(actor, actor.id)


@pytest.mark.parametrize("role", [UserRole.TEAM_LEAD, UserRole.VIP, UserRole.TEAM_MEMBER])
def test_status_change_denied_without_capability(role):
    assert not access.check_change_status(_user(role), uuid.uuid4())


def test_role_change_admin_only_and_not_self():
    admin = _user(UserRole.ADMIN)
    assert access.check_change_role(admin, uuid.uuid4())
    assert not access.check_change_role(admin, admin.id)
    assert not access.check_change_role(_user(UserRole.MANAGER), uuid.uuid4())


# ── Groupings ───────────────────────────────────────────────

@pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.VIP, UserRole.MANAGER])
def test_team_and_subordinate_queries_open_to_broad_roles(role):
    actor = _user(role)
    assert access.check_team_access(actor, TEAM_B)
    assert access.check_subordinates_access(actor, BOSS)


def test_team_lead_team_access_limited_to_own_team():
    lead = _user(UserRole.TEAM_LEAD, team_id=TEAM_A)
    assert access.check_team_access(lead, TEAM_A)
    assert not access.check_team_access(lead, TEAM_B)
    assert not access.check_team_access(_user(UserRole.TEAM_MEMBER, team_id=TEAM_A), TEAM_A)


def test_subordinates_of_own_manager_visible_to_anyone():
    member = _user(UserRole.TEAM_MEMBER, manager_id=BOSS)
    assert access.check_subordinates_access(member, BOSS)
    assert not access.check_subordinates_access(member, uuid.uuid4())
    assert not access.check_subordinates_access(_user(UserRole.TEAM_LEAD), BOSS)


# ── Field transforms ────────────────────────────────────────

def test_project_keeps_only_listed_fields():
    record = {"id": 1, "email": "a@b.c", "bio": "hi", "password_hash": "h"}
    assert access.project(record, access.SUMMARY_FIELDS) == {"id": 1, "email": "a@b.c"}


def test_shape_read_redacts_hash_for_redacted_access():
    record = {"id": 1, "password_hash": "h", "bio": "hi"}
    assert access.shape_read(record, ReadAccess.REDACTED) == {"id": 1, "bio": "hi"}
    assert access.shape_read(record, ReadAccess.FULL) == record


def test_strip_update_for_vip_drops_placement_fields():
    patch = {
        "first_name": "New",
        "role": UserRole.ADMIN,
        "status": "suspended",
        "manager_id": BOSS,
        "team_id": TEAM_A,
    }
    assert access.strip_update(_user(UserRole.VIP), patch) == {"first_name": "New"}


def test_strip_update_for_others_drops_role_and_status_only():
    patch = {"bio": "x", "role": UserRole.ADMIN, "status": "inactive", "team_id": TEAM_A}
    stripped = access.strip_update(_user(UserRole.ADMIN), patch)
    assert stripped == {"bio": "x", "team_id": TEAM_A}


def test_require_raises_permission_denied():
    with pytest.raises(PermissionDeniedError, match="nope"):
        access.require(access.deny("nope"))
    access.require(access.ALLOW)


def test_capabilities():
    assert access.can_manage_users(_user(UserRole.MANAGER))
    assert not access.can_manage_users(_user(UserRole.TEAM_LEAD))
    assert access.can_manage_team(_user(UserRole.TEAM_LEAD))
    assert not access.can_manage_team(_user(UserRole.VIP))


def test_teamless_lead_leads_nobody():
    lead = _user(UserRole.TEAM_LEAD)
    teamless = _user(UserRole.TEAM_MEMBER)

    assert access.list_scope(lead) is ListScope.SELF
    assert access.read_access(lead, teamless) is ReadAccess.DENIED
    assert not access.check_update(lead, teamless)
    assert not access.same_team(lead, teamless)
