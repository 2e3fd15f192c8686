"""User repository implementations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(Protocol):
    async def get_by_email(self, email: str):
        ...

    async def get_user(self, user_id: int):
        ...

    async def create_user(self, email: str, name: Optional[str], country: Optional[str]):
        ...

    async def update_user(self, user, *, name: Optional[str], country: Optional[str]):
        ...


class SQLUserRepository:
    """User repository backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def get_user(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create_user(self, email: str, name: Optional[str], country: Optional[str]) -> User:
        user = User(email=normalize_email(email), name=name, country=country)
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def update_user(self, user: User, *, name: Optional[str], country: Optional[str]) -> User:
        if name is not None:
            user.name = name
        if country is not None:
            user.country = country
        await self.db.flush()
        await self.db.refresh(user)
        return user


@dataclass
class InMemoryUser:
    id: int
    email: str
    name: Optional[str]
    country: Optional[str]
    created_at: datetime
    updated_at: datetime


class InMemoryUserRepository:
    """In-memory repository for tests and local demos."""

    def __init__(self):
        self._users: list[InMemoryUser] = []
        self._next_id = 1

    async def get_by_email(self, email: str) -> Optional[InMemoryUser]:
        email = normalize_email(email)
        for user in self._users:
            if user.email == email:
                return user
        return None

    async def get_user(self, user_id: int) -> Optional[InMemoryUser]:
        for user in self._users:
            if user.id == user_id:
                return user
        return None

    async def create_user(self, email: str, name: Optional[str], country: Optional[str]) -> InMemoryUser:
        now = datetime.now(timezone.utc)
        user = InMemoryUser(
            id=self._next_id,
            email=normalize_email(email),
            name=name,
            country=country,
            created_at=now,
            updated_at=now,
        )
        self._users.append(user)
        self._next_id += 1
        return user

    async def update_user(
        self, user: InMemoryUser, *, name: Optional[str], country: Optional[str]
    ) -> InMemoryUser:
        if name is not None:
            user.name = name
        if country is not None:
            user.country = country
        user.updated_at = datetime.now(timezone.utc)
        return user
