from types import SimpleNamespace
from typing import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

from lingua_learn.core.database import create_all
from lingua_learn.core.database.entities import (
    ContentStatus,
    Exercise,
    LearningPath,
    Lesson,
    Section,
    Unit,
    User,
    UserRole,
)
from lingua_learn.core.security import hash_password

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "secret-password"


@pytest_asyncio.fixture
async def test_engine():
    """A fresh in-memory database for every test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the lifespan mocked and the session overridden."""
    from lingua_learn.core.database import get_session
    from lingua_learn.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    async def mock_lifespan(app):
        yield

    with patch("lingua_learn.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def media_root(tmp_path, monkeypatch):
    """Uploaded files land in a per-test directory."""
    from lingua_learn.server.core.config import settings

    root = tmp_path / "media"
    monkeypatch.setattr(settings, "media_root", str(root))
    return root


async def _make_user(session: AsyncSession, name: str, email: str, role: UserRole) -> User:
    user = User(name=name, email=email, password=hash_password(PASSWORD), role=role.value)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def _bearer(session: AsyncSession, user: User) -> dict:
    from lingua_learn.server.services.auth import AuthService

    token = await AuthService(session).issue_token(user)
    await session.commit()
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def learner(session: AsyncSession) -> User:
    return await _make_user(session, "Lena Learner", "lena@lingua.dev", UserRole.USER)


@pytest_asyncio.fixture
async def admin(session: AsyncSession) -> User:
    return await _make_user(session, "Ada Admin", "ada@lingua.dev", UserRole.ADMIN)


@pytest_asyncio.fixture
async def learner_headers(session: AsyncSession, learner: User) -> dict:
    return await _bearer(session, learner)


@pytest_asyncio.fixture
async def admin_headers(session: AsyncSession, admin: User) -> dict:
    return await _bearer(session, admin)


@pytest_asyncio.fixture
async def content_tree(session: AsyncSession) -> SimpleNamespace:
    """A draft path with one unit, one lesson, one section and two exercises."""
    path = LearningPath(title="Spanish Basics", target_level="A1", status=ContentStatus.DRAFT.value)
    session.add(path)
    await session.flush()
    unit = Unit(learning_path_id=path.id, title="Greetings", order=1)
    session.add(unit)
    await session.flush()
    lesson = Lesson(unit_id=unit.id, title="Hello", order=1)
    session.add(lesson)
    await session.flush()
    section = Section(lesson_id=lesson.id, title="Say hello", order=1)
    session.add(section)
    await session.flush()
    choice = Exercise(
        section_id=section.id,
        type="multiple_choice",
        content={"question": "Hello?", "options": ["Hola", "Adiós"], "correct": "Hola"},
        order=1,
    )
    blank = Exercise(
        section_id=section.id,
        type="fill_blank",
        content={"text": "___ días", "blanks": [0], "correct": ["Buenos"]},
        order=2,
    )
    session.add_all([choice, blank])
    await session.commit()
    for entity in (path, unit, lesson, section, choice, blank):
        await session.refresh(entity)
    return SimpleNamespace(path=path, unit=unit, lesson=lesson, section=section, choice=choice, blank=blank)
