"""Database engine and session management."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def make_engine(database_url: str, **kwargs) -> AsyncEngine:
    """Build the async engine for a configured database URL."""
    return create_async_engine(database_url, echo=False, **kwargs)


def make_session_factory(engine: AsyncEngine) -> sessionmaker:
    """Session factory shared by the identity service and the trade store."""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
