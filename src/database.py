import os
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from dotenv import load_dotenv
from asyncpg import Connection
from uuid import uuid4
from sqlalchemy import (
    JSON, Column, Integer, String,
    func, DateTime,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

load_dotenv()

POSTGRES_USER = os.getenv("POSTGRES_USER")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD")
POSTGRES_DB = os.getenv("POSTGRES_DB_URL")

class Base(DeclarativeBase): pass


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if POSTGRES_DB:
        return f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_DB}"
    # single organizer on one machine
    return "sqlite+aiosqlite:///./americano.db"

DATABASE_URL = _database_url()

class FixedConnection(Connection):
    def _get_unique_id(self, prefix: str) -> str:
        return f'__asyncpg_{prefix}_{uuid4()}__'


def _connect_args(url: str) -> dict:
    if url.startswith("postgresql+asyncpg"):
        return {
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
            "connection_class": FixedConnection,
        }
    return {}


engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    connect_args=_connect_args(DATABASE_URL),
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def get_session():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

#ORM

class SessionStateORM(Base):
    __tablename__ = "session_states"

    key            = Column(String, primary_key=True)  # versioned, e.g. padelAmericanoState_v1
    schema_version = Column(Integer, nullable=False)
    payload        = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    updated_at     = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
