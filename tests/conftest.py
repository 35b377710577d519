import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from streak_tracker.database import get_session, make_engine
from streak_tracker.main import app
from streak_tracker.models import Streak, User


@pytest.fixture
def engine():
    """Fresh in-memory database per test, foreign keys enforced."""
    engine = make_engine("sqlite://", echo=False, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(name="Ada", email=None):
        user = User(name=name, email=email or f"{name.lower()}@example.com", password_hash="x")
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def make_streak(session):
    def _make(title="Read 10 pages", difficulty="easy", participant_count=0, **kwargs):
        streak = Streak(title=title, difficulty=difficulty, participant_count=participant_count, **kwargs)
        session.add(streak)
        session.commit()
        session.refresh(streak)
        return streak

    return _make
