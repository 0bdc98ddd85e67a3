"""Shared test fixtures."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from confirmable.core.database import get_session
from confirmable.main import app
from confirmable.models import Episode, Script, User


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="user")
def user_fixture(session: Session) -> User:
    """The first user, id 1 (same as the fallback confirmer)."""
    user = User(name="First User", email="first@example.com")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="other_user")
def other_user_fixture(session: Session, user: User) -> User:
    """A second user, created after ``user``."""
    other = User(name="Other User", email="other@example.com")
    session.add(other)
    session.commit()
    session.refresh(other)
    return other


@pytest.fixture(name="episode")
def episode_fixture(session: Session) -> Episode:
    """A saved episode with no stage confirmed."""
    episode = Episode(id=uuid4(), title="Pilot")
    session.add(episode)
    session.commit()
    session.refresh(episode)
    return episode


@pytest.fixture(name="fresh_episode")
def fresh_episode_fixture() -> Episode:
    """An episode that was never added to a session."""
    return Episode(title="Unsaved")


@pytest.fixture(name="script")
def script_fixture(session: Session) -> Script:
    """A saved, unapproved script."""
    script = Script(title="Pilot script")
    session.add(script)
    session.commit()
    session.refresh(script)
    return script
