from datetime import datetime
from uuid import uuid4

from sqlmodel import Field, SQLModel

from scoreboard.models.user import utcnow


class Score(SQLModel, table=True):
    __tablename__ = "scores"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    score: int = Field(index=True)  # always > 0
    user_id: str = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)
