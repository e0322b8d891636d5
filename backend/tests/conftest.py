import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

import scoreboard.models  # noqa: F401  register all models with SQLModel metadata
from scoreboard.api.deps import get_password_hasher, get_rate_limiter
from scoreboard.auth import PasswordHasher
from scoreboard.database import get_session
from scoreboard.main import app
from scoreboard.models.user import User, UserRole
from scoreboard.services.rate_limit import (
    SCORE_SUBMIT,
    FixedWindowRateLimiter,
    RateLimitRule,
)

# Minimum bcrypt cost keeps the suite fast
test_hasher = PasswordHasher(rounds=4)


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def hasher() -> PasswordHasher:
    return test_hasher


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        default_rule=RateLimitRule(limit=100, window_seconds=60),
        rules={SCORE_SUBMIT: RateLimitRule(limit=10, window_seconds=60)},
        clock=clock,
    )


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        # Seed admin user
        admin = User(
            username="admin",
            password_hash=test_hasher.hash("adminpass"),
            role=UserRole.ADMIN,
        )
        session.add(admin)
        session.commit()
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session, rate_limiter: FixedWindowRateLimiter):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_password_hasher] = lambda: test_hasher
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token(client: TestClient) -> str:
    response = client.post(
        "/api/auth/login",
        json={"username": "admin", "password": "adminpass"},
    )
    return response.json()["access_token"]


@pytest.fixture
def user_token(client: TestClient, session: Session) -> str:
    user = User(
        username="testuser",
        password_hash=test_hasher.hash("testpass"),
        role=UserRole.USER,
    )
    session.add(user)
    session.commit()
    response = client.post(
        "/api/auth/login",
        json={"username": "testuser", "password": "testpass"},
    )
    return response.json()["access_token"]
