from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from scoreboard.exceptions import ValidationError
from scoreboard.models.score import Score
from scoreboard.models.user import User
from scoreboard.repositories import ScoreRepository
from scoreboard.services.leaderboard import LeaderboardService

T0 = datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture
def players(session: Session) -> dict[str, User]:
    users = {}
    for name in ("alice", "bob", "carol", "dave"):
        user = User(username=name, password_hash="x")
        session.add(user)
        users[name] = user
    session.commit()
    for user in users.values():
        session.refresh(user)
    return users


def _add(session: Session, user: User, value: int, minutes: int) -> None:
    session.add(Score(score=value, user_id=user.id, created_at=T0 + timedelta(minutes=minutes)))
    session.commit()


@pytest.fixture
def service(session: Session) -> LeaderboardService:
    return LeaderboardService(ScoreRepository(session), max_limit=100)


def test_empty_leaderboard(service: LeaderboardService):
    assert service.top_scores() == []


def test_ranks_users_by_best_score(session: Session, service: LeaderboardService, players):
    _add(session, players["alice"], 500, 0)
    _add(session, players["alice"], 300, 1)
    _add(session, players["bob"], 900, 2)
    _add(session, players["carol"], 100, 3)

    board = service.top_scores()
    assert [(e.rank, e.player_name, e.score) for e in board] == [
        (1, "bob", 900),
        (2, "alice", 500),
        (3, "carol", 100),
    ]
    assert board[1].achieved_at == T0


def test_one_entry_per_user(session: Session, service: LeaderboardService, players):
    for minute, value in enumerate([10, 50, 30, 50]):
        _add(session, players["alice"], value, minute)
    board = service.top_scores()
    assert len(board) == 1
    assert board[0].score == 50
    # First time the best was reached
    assert board[0].achieved_at == T0 + timedelta(minutes=1)


def test_equal_scores_get_distinct_ranks(session: Session, service: LeaderboardService, players):
    _add(session, players["carol"], 700, 5)
    _add(session, players["alice"], 700, 1)
    _add(session, players["bob"], 700, 1)

    board = service.top_scores()
    assert [e.rank for e in board] == [1, 2, 3]
    assert [e.player_name for e in board] == ["alice", "bob", "carol"]


def test_limit_truncates(session: Session, service: LeaderboardService, players):
    for minute, (name, value) in enumerate(
        [("alice", 10), ("bob", 40), ("carol", 30), ("dave", 20)]
    ):
        _add(session, players[name], value, minute)

    board = service.top_scores(limit=2)
    assert [e.player_name for e in board] == ["bob", "carol"]

    board = service.top_scores(limit=50)
    assert len(board) == 4
    scores = [e.score for e in board]
    assert scores == sorted(scores, reverse=True)
    assert [e.rank for e in board] == list(range(1, 5))


@pytest.mark.parametrize("limit", [0, -1, 101, True, "5"])
def test_invalid_limit(service: LeaderboardService, limit):
    with pytest.raises(ValidationError):
        service.top_scores(limit=limit)


def test_leaderboard_endpoint(client: TestClient, session: Session, players):
    _add(session, players["alice"], 500, 0)
    _add(session, players["bob"], 900, 1)
    _add(session, players["carol"], 100, 2)

    response = client.get("/api/leaderboard", params={"limit": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Leaderboard retrieved successfully"
    assert [(e["rank"], e["player_name"], e["score"]) for e in data["leaderboard"]] == [
        (1, "bob", 900),
        (2, "alice", 500),
    ]
    assert "achieved_at" in data["leaderboard"][0]


def test_leaderboard_default_limit(client: TestClient, session: Session):
    for i in range(12):
        user = User(username=f"player{i:02d}", password_hash="x")
        session.add(user)
        session.commit()
        session.refresh(user)
        _add(session, user, 100 + i, i)

    board = client.get("/api/leaderboard").json()["leaderboard"]
    assert len(board) == 10
    assert board[0]["player_name"] == "player11"


@pytest.mark.parametrize("limit", ["0", "101", "abc", "2.5"])
def test_leaderboard_rejects_bad_limit(client: TestClient, limit: str):
    response = client.get("/api/leaderboard", params={"limit": limit})
    assert response.status_code == 422
