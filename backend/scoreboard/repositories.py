"""Narrow data-access layer over the SQLModel session."""

from collections.abc import Iterator

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from scoreboard.exceptions import ConflictError
from scoreboard.models.score import Score
from scoreboard.models.user import User


class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def find_by_username(self, username: str, active_only: bool = False) -> User | None:
        statement = select(User).where(User.username == username)
        if active_only:
            statement = statement.where(User.is_active == True)  # noqa: E712
        return self.session.exec(statement).first()

    def create(self, user: User) -> User:
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # A concurrent registration won the unique index on username
            self.session.rollback()
            raise ConflictError("Username already exists")
        self.session.refresh(user)
        return user


class ScoreRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, score: Score) -> Score:
        self.session.add(score)
        self.session.commit()
        self.session.refresh(score)
        return score

    def iter_with_owner(self) -> Iterator[tuple[Score, str]]:
        """Yield every score with its owner's username."""
        statement = select(Score, User.username).join(User, Score.user_id == User.id)
        yield from self.session.exec(statement)

    def list_for_user(self, user_id: str, limit: int) -> list[Score]:
        statement = (
            select(Score)
            .where(Score.user_id == user_id)
            .order_by(Score.score.desc(), Score.created_at.desc())
            .limit(limit)
        )
        return list(self.session.exec(statement).all())

    def best_for_user(self, user_id: str) -> Score | None:
        statement = (
            select(Score)
            .where(Score.user_id == user_id)
            .order_by(Score.score.desc(), Score.created_at.desc())
        )
        return self.session.exec(statement).first()
