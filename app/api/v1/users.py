"""Users CRUD: every decision delegated to the directory service."""

import uuid
from typing import Any

from fastapi import APIRouter, status

from app.api.deps import Directory, Principal
from app.models.user import RoleChange, StatusChange, UserCreate, UserRead, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])

# Projected records (vip listing) carry only their projected keys.
_READ = {"response_model": UserRead, "response_model_exclude_unset": True}
_LIST = {"response_model": list[UserRead], "response_model_exclude_unset": True}


@router.post("", status_code=status.HTTP_201_CREATED, **_READ)
async def create_user(
    body: UserCreate,
    principal: Principal,
    directory: Directory,
) -> dict[str, Any]:
    return await directory.create_as(body.model_dump(), principal)


@router.get("", **_LIST)
async def list_users(
    principal: Principal,
    directory: Directory,
) -> list[dict[str, Any]]:
    return await directory.find_all(principal)


# ── Own profile (declared before /{user_id}) ──────────────────

@router.get("/me", **_READ)
async def get_my_profile(
    principal: Principal,
    directory: Directory,
) -> dict[str, Any]:
    return await directory.find_one(principal.id, principal)


@router.patch("/me", **_READ)
async def update_my_profile(
    body: UserUpdate,
    principal: Principal,
    directory: Directory,
) -> dict[str, Any]:
    return await directory.update(
        principal.id, body.model_dump(exclude_unset=True), principal
    )


# ── Groupings ─────────────────────────────────────────────────

@router.get("/teams/{team_id}/members", **_LIST)
async def list_team_members(
    team_id: uuid.UUID,
    principal: Principal,
    directory: Directory,
) -> list[dict[str, Any]]:
    return await directory.find_team_members(team_id, principal)


@router.get("/managers/{manager_id}/subordinates", **_LIST)
async def list_subordinates(
    manager_id: uuid.UUID,
    principal: Principal,
    directory: Directory,
) -> list[dict[str, Any]]:
    return await directory.find_subordinates(manager_id, principal)


# ── Single record ─────────────────────────────────────────────

@router.get("/{user_id}", **_READ)
async def get_user(
    user_id: uuid.UUID,
    principal: Principal,
    directory: Directory,
) -> dict[str, Any]:
    return await directory.find_one(user_id, principal)


@router.patch("/{user_id}", **_READ)
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    principal: Principal,
    directory: Directory,
) -> dict[str, Any]:
    return await directory.update(user_id, body.model_dump(exclude_unset=True), principal)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    principal: Principal,
    directory: Directory,
) -> None:
    await directory.remove(user_id, principal)


@router.patch("/{user_id}/status", **_READ)
async def change_user_status(
    user_id: uuid.UUID,
    body: StatusChange,
    principal: Principal,
    directory: Directory,
) -> dict[str, Any]:
    return await directory.change_status(user_id, body.status, principal)


@router.patch("/{user_id}/role", **_READ)
async def change_user_role(
    user_id: uuid.UUID,
    body: RoleChange,
    principal: Principal,
    directory: Directory,
) -> dict[str, Any]:
    return await directory.change_role(user_id, body.role, principal)
