from scoreboard.models.score import Score
from scoreboard.models.user import User, UserRole

__all__ = [
    "Score",
    "User",
    "UserRole",
]
