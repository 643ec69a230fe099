"""
SQLAlchemy database models and configuration for the local store.

Architecture Decision: Why SQLAlchemy for a key-value store?
- The local fallback keeps whole collections under fixed keys; a single
  table of (key, JSON value) rows is enough and stays durable across runs
- Async engine (aiosqlite) keeps the local path awaitable like the remote one
- Tests swap in an in-memory database with no code changes
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Text, DateTime

from timekeeper.infra.config import Settings, get_settings


# Base class for all models
class Base(DeclarativeBase):
    pass


class KeyValueModel(Base):
    """One persisted collection, serialized as a JSON list"""
    __tablename__ = "local_storage"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now,
                                                 onupdate=datetime.now, nullable=False)


class DatabaseEngine:
    """
    Manages database connection and session lifecycle.

    Created once at startup and handed to the local store.
    """

    def __init__(self, db_url: str):
        self.engine = create_async_engine(db_url, echo=False)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> 'DatabaseEngine':
        return cls(settings.get_db_url())

    async def create_tables(self):
        """Create all tables in the database"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def get_session(self) -> AsyncSession:
        """Get a new database session"""
        return self.session_factory()

    async def dispose(self):
        await self.engine.dispose()


async def init_db(db_url: Optional[str] = None, settings: Optional[Settings] = None) -> DatabaseEngine:
    """Create the engine and its tables"""
    if db_url is None:
        settings = settings or get_settings()
        db_url = settings.get_db_url()
    engine = DatabaseEngine(db_url)
    await engine.create_tables()
    return engine
