"""
Pytest configuration and fixtures for PyTrack tests.
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import pytrack.models  # noqa: F401  (registers every table on Base.metadata)
from pytrack.db.base import Base
from pytrack.models.conversation import Conversation
from pytrack.models.page import Page
from pytrack.models.person import Person
from pytrack.models.project import Project
from pytrack.models.task import Task
from pytrack.models.task_list import TaskList
from pytrack.models.user import User

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create an in-memory database engine per test function."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


async def _create_user(db: AsyncSession, login: str) -> User:
    user = User(login=login, email=f"{login}@example.com", name=login.title())
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Owner of the test project and its objects."""
    return await _create_user(db_session, "owner")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second project member."""
    return await _create_user(db_session, "member")


@pytest_asyncio.fixture
async def third_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "observer")


@pytest_asyncio.fixture
async def test_project(db_session: AsyncSession, test_user: User) -> Project:
    project = Project(name="Test Project", permalink="test-project", user_id=test_user.id)
    db_session.add(project)
    await db_session.commit()
    return project


@pytest_asyncio.fixture
async def test_person(db_session: AsyncSession, test_user: User, test_project: Project) -> Person:
    person = Person(project_id=test_project.id, user_id=test_user.id)
    db_session.add(person)
    await db_session.commit()
    return person


@pytest_asyncio.fixture
async def test_task(db_session: AsyncSession, test_user: User, test_project: Project) -> Task:
    task = Task(name="Write the report", user_id=test_user.id, project_id=test_project.id)
    db_session.add(task)
    await db_session.commit()
    return task


@pytest_asyncio.fixture
async def test_conversation(
    db_session: AsyncSession,
    test_user: User,
    test_project: Project,
) -> Conversation:
    conversation = Conversation(
        name="Kickoff",
        user_id=test_user.id,
        project_id=test_project.id,
    )
    db_session.add(conversation)
    await db_session.commit()
    return conversation


@pytest_asyncio.fixture
async def simple_conversation(
    db_session: AsyncSession,
    test_user: User,
    test_project: Project,
) -> Conversation:
    conversation = Conversation(
        user_id=test_user.id,
        project_id=test_project.id,
        simple=True,
    )
    db_session.add(conversation)
    await db_session.commit()
    return conversation


@pytest_asyncio.fixture
async def test_task_list(
    db_session: AsyncSession,
    test_user: User,
    test_project: Project,
) -> TaskList:
    task_list = TaskList(name="Backlog", user_id=test_user.id, project_id=test_project.id)
    db_session.add(task_list)
    await db_session.commit()
    return task_list


@pytest_asyncio.fixture
async def test_page(db_session: AsyncSession, test_user: User, test_project: Project) -> Page:
    page = Page(name="Notes", user_id=test_user.id, project_id=test_project.id)
    db_session.add(page)
    await db_session.commit()
    return page
