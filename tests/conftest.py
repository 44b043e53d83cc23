import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from americano.models import Player, ScoreRow, Settings, Tournament
from database import Base, get_session
from main import app


@pytest.fixture
def make_tournament():
    """Tournament whose player ids equal their names, order = roster order."""
    def _make(names, courts=1, max_points=21):
        return Tournament(
            settings=Settings(courts=courts, max_points=max_points),
            players=[Player(id=n, name=n) for n in names],
            order=list(names),
            scores={n: ScoreRow() for n in names},
        )
    return _make


@pytest.fixture
def session_factory(tmp_path):
    path = tmp_path / "americano.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False,
    )


@pytest.fixture
def client(session_factory):
    async def _get_session():
        async with session_factory() as session:
            yield session
            await session.commit()

    app.dependency_overrides[get_session] = _get_session
    # no context manager: lifespan (create_tables on the real engine) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()
