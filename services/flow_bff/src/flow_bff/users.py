"""Local user storage: principal email → company unique identifier (phone number)."""
from __future__ import annotations

from typing import Mapping, Optional, Protocol

from sqlalchemy import Integer, String, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import NullPool


class Base(DeclarativeBase):
    """Base class for local models."""
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)


class UserDirectory(Protocol):
    async def phone_number_for(self, email: str) -> Optional[str]:
        """Tenant key of *email*, or None when the user or the number is unknown."""
        ...

    async def close(self) -> None:
        ...


class SqlUserDirectory:
    """SQLAlchemy async implementation over the ``users`` table."""

    def __init__(self, database_url: str, *, engine: Optional[AsyncEngine] = None) -> None:
        self._engine = engine or create_async_engine(database_url, poolclass=NullPool)
        self._sessions = async_sessionmaker(bind=self._engine, class_=AsyncSession, expire_on_commit=False)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_schema(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def phone_number_for(self, email: str) -> Optional[str]:
        async with self._sessions() as session:
            phone = await session.scalar(select(User.phone_number).where(User.email == email))
        phone = (phone or "").strip()
        return phone or None

    async def add_user(self, email: str, phone_number: Optional[str]) -> None:
        async with self._sessions() as session:
            session.add(User(email=email, phone_number=phone_number))
            await session.commit()

    async def close(self) -> None:
        await self._engine.dispose()


class StaticUserDirectory:
    """In-memory directory for local development and tests."""

    def __init__(self, phones: Mapping[str, Optional[str]]) -> None:
        self._phones = {k.strip().lower(): v for k, v in phones.items()}
        self.lookups: list[str] = []

    async def phone_number_for(self, email: str) -> Optional[str]:
        self.lookups.append(email)
        phone = (self._phones.get(email) or "").strip()
        return phone or None

    async def close(self) -> None:
        return None
