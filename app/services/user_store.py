"""Persistence for directory records over an async SQLModel session."""

import uuid
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.exceptions import ConflictError
from app.models.user import User


class UserRepository:
    """Thin store: filter lookups, insert, partial update, hard delete.

    Uniqueness of ``email`` is enforced by the table's unique index; a
    violation surfaces as ``ConflictError`` so concurrent check-then-insert
    races still fail cleanly.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_one(self, **filters: Any) -> User | None:
        stmt = select(User).filter_by(**filters).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def find(self, **filters: Any) -> list[User]:
        stmt = (
            select(User)
            .filter_by(**filters)
            .order_by(User.email.asc())  # type: ignore[attr-defined]
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def insert(self, fields: dict[str, Any]) -> User:
        user = User(**fields)
        self.session.add(user)
        await self._commit()
        await self.session.refresh(user)
        return user

    async def update_by_id(self, user_id: uuid.UUID, patch: dict[str, Any]) -> None:
        user = await self.session.get(User, user_id)
        if user is None:
            return
        for field, value in patch.items():
            setattr(user, field, value)
        user.touch()
        self.session.add(user)
        await self._commit()

    async def delete(self, user: User) -> None:
        await self.session.delete(user)
        await self.session.commit()

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError("User with this email already exists") from exc
