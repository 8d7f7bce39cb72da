"""User directory service: every use case behind the users API.

Each operation fetches what it needs, asks ``app.services.access`` for a
decision, performs the effect through ``UserRepository`` and returns plain
dict records shaped for the acting principal. The principal is always
passed in explicitly.
"""

import logging
import uuid
from typing import Any

from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from app.core.security import hash_password
from app.models.base import utcnow
from app.models.user import User, UserRole, UserStatus
from app.services import access
from app.services.access import ListScope, Principal, ReadAccess
from app.services.user_store import UserRepository

logger = logging.getLogger(__name__)

# Columns that cannot be cleared through a partial update.
REQUIRED_FIELDS = frozenset({"email", "password", "first_name", "last_name"})


def to_record(user: User) -> dict[str, Any]:
    return user.model_dump()


class UserDirectory:
    def __init__(self, repo: UserRepository) -> None:
        self.repo = repo

    # ── Creation ──────────────────────────────────────────────

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new user, hashing the password.

        Role and status default to team_member / active when absent.
        Raises ``ConflictError`` if the email is taken.
        """
        if await self.find_by_email(data["email"]) is not None:
            raise ConflictError("User with this email already exists")

        fields = dict(data)
        fields["password_hash"] = hash_password(fields.pop("password"))
        fields["role"] = fields.get("role") or UserRole.TEAM_MEMBER
        fields["status"] = fields.get("status") or UserStatus.ACTIVE

        user = await self.repo.insert(fields)
        logger.info("Created user %s with role %s", user.id, user.role)
        return to_record(user)

    async def create_as(self, data: dict[str, Any], principal: Principal) -> dict[str, Any]:
        self._require(access.check_create(principal), principal, "create")
        return await self.create(data)

    async def bootstrap(self, data: dict[str, Any]) -> dict[str, Any]:
        """Create the first admin of an empty directory."""
        if await self.repo.find_one() is not None:
            raise ConflictError("Directory is already initialised")
        return await self.create({**data, "role": UserRole.ADMIN, "status": UserStatus.ACTIVE})

    # ── Reads ─────────────────────────────────────────────────

    async def find_by_email(self, email: str) -> User | None:
        return await self.repo.find_one(email=email)

    async def find_all(self, principal: Principal) -> list[dict[str, Any]]:
        scope = access.list_scope(principal)
        if scope is ListScope.SUMMARY:
            users = await self.repo.find()
            return [access.project(to_record(u), access.SUMMARY_FIELDS) for u in users]
        if scope is ListScope.ALL:
            users = await self.repo.find()
        elif scope is ListScope.TEAM:
            users = await self.repo.find(team_id=principal.team_id)
        else:
            users = await self.repo.find(id=principal.id)
        return [to_record(u) for u in users]

    async def find_one(self, user_id: uuid.UUID, principal: Principal) -> dict[str, Any]:
        user, read = await self._resolve(user_id, principal)
        return access.shape_read(to_record(user), read)

    async def find_team_members(self, team_id: uuid.UUID, principal: Principal) -> list[dict[str, Any]]:
        self._require(access.check_team_access(principal, team_id), principal, "list team")
        return [to_record(u) for u in await self.repo.find(team_id=team_id)]

    async def find_subordinates(self, manager_id: uuid.UUID, principal: Principal) -> list[dict[str, Any]]:
        self._require(
            access.check_subordinates_access(principal, manager_id), principal, "list subordinates"
        )
        return [to_record(u) for u in await self.repo.find(manager_id=manager_id)]

    # ── Mutations ─────────────────────────────────────────────

    async def update(
        self, user_id: uuid.UUID, patch: dict[str, Any], principal: Principal
    ) -> dict[str, Any]:
        user, read = await self._resolve(user_id, principal)
        self._require(access.check_update(principal, user), principal, "update", user_id)

        changes = {
            k: v for k, v in access.strip_update(principal, patch).items()
            if not (v is None and k in REQUIRED_FIELDS)
        }

        new_email = changes.get("email")
        if new_email is not None and new_email != user.email:
            if await self.find_by_email(new_email) is not None:
                raise ConflictError("Email already taken")

        if "password" in changes:
            changes["password_hash"] = hash_password(changes.pop("password"))

        await self.repo.update_by_id(user_id, changes)
        logger.info(
            "User %s updated %s (fields: %s)",
            principal.id,
            user_id,
            ", ".join(sorted(changes)) or "none",
        )
        return await self._reload(user_id, read)

    async def remove(self, user_id: uuid.UUID, principal: Principal) -> None:
        user, _ = await self._resolve(user_id, principal)
        self._require(access.check_delete(principal, user_id), principal, "delete", user_id)
        await self.repo.delete(user)
        logger.info("User %s deleted %s", principal.id, user_id)

    async def change_status(
        self, user_id: uuid.UUID, status: UserStatus, principal: Principal
    ) -> dict[str, Any]:
        _, read = await self._resolve(user_id, principal)
        self._require(
            access.check_change_status(principal, user_id), principal, "change status of", user_id
        )
        await self.repo.update_by_id(user_id, {"status": status})
        logger.info("User %s set status of %s to %s", principal.id, user_id, status)
        return await self._reload(user_id, read)

    async def change_role(
        self, user_id: uuid.UUID, role: UserRole, principal: Principal
    ) -> dict[str, Any]:
        _, read = await self._resolve(user_id, principal)
        self._require(
            access.check_change_role(principal, user_id), principal, "change role of", user_id
        )
        await self.repo.update_by_id(user_id, {"role": role})
        logger.info("User %s set role of %s to %s", principal.id, user_id, role)
        return await self._reload(user_id, read)

    async def update_last_login(self, user_id: uuid.UUID) -> None:
        """Stamp a successful sign-in. System-initiated, no access check."""
        await self.repo.update_by_id(user_id, {"last_login_at": utcnow()})

    # ── Internal helpers ──────────────────────────────────────

    async def _resolve(self, user_id: uuid.UUID, principal: Principal) -> tuple[User, ReadAccess]:
        """Fetch the target and apply the read rule. Not-found wins over denial."""
        user = await self.repo.find_one(id=user_id)
        if user is None:
            raise NotFoundError("User not found")
        read = access.read_access(principal, user)
        self._require(access.check_read(principal, user), principal, "view", user_id)
        return user, read

    async def _reload(self, user_id: uuid.UUID, read: ReadAccess) -> dict[str, Any]:
        """Re-read a record just written, shaped by the access granted before the write.

        A team lead moving a member to another team still gets the saved record
        back rather than a denial for a change that has already been committed.
        """
        user = await self.repo.find_one(id=user_id)
        if user is None:
            raise NotFoundError("User not found")
        return access.shape_read(to_record(user), read)

    @staticmethod
    def _require(
        decision: access.Decision,
        principal: Principal,
        action: str,
        target_id: uuid.UUID | None = None,
    ) -> None:
        try:
            access.require(decision)
        except PermissionDeniedError:
            logger.warning(
                "Denied: user %s (%s) tried to %s %s",
                principal.id,
                principal.role,
                action,
                target_id or "-",
            )
            raise
