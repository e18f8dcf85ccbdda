import os

# antes de importar app: settings y el engine del módulo leen esto
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import build_engine, get_session
from app.main import app
from app.posts.repository import create_post
from app.users.repository import create_user


@pytest.fixture
async def engine():
    eng = build_engine("sqlite+aiosqlite://")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db(engine):
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def make_user(db):
    seq = {"n": 0}

    async def _make(username: str | None = None):
        seq["n"] += 1
        name = username or f"user{seq['n']}"
        user = await create_user(db, name, f"{name}@example.com", "not-a-real-hash")
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_post(db):
    seq = {"n": 0}

    async def _make(title: str | None = None, body: str | None = "body"):
        seq["n"] += 1
        post = await create_post(db, title or f"Post {seq['n']}", body)
        await db.commit()
        return post

    return _make


@pytest.fixture
async def client(db):
    async def _session_override():
        yield db

    app.dependency_overrides[get_session] = _session_override
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}

    return _headers
