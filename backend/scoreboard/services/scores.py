import logging

from scoreboard.auth import TokenClaims
from scoreboard.exceptions import NotFoundError, ValidationError
from scoreboard.models.score import Score
from scoreboard.models.user import User
from scoreboard.repositories import ScoreRepository, UserRepository

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10

# Scores are stored in a 32-bit integer column
MAX_SCORE = 2**31 - 1


class ScoreService:
    """Score submission and per-user history.

    ``submit_score`` expects the ownership check to have passed already.
    """

    def __init__(self, users: UserRepository, scores: ScoreRepository):
        self.users = users
        self.scores = scores

    def submit_score(
        self,
        value: int,
        caller: TokenClaims,
        user_id: str | None = None,
        player_name: str | None = None,
    ) -> Score:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValidationError("Score must be a positive integer")
        if value > MAX_SCORE:
            raise ValidationError(f"Score must be at most {MAX_SCORE}")

        owner = self._resolve_owner(caller, user_id, player_name)
        score = self.scores.create(Score(score=value, user_id=owner))
        if owner != caller.subject:
            logger.info(
                f"Admin {caller.username} submitted score {value} for user {owner}"
            )
        else:
            logger.info(f"User {caller.username} submitted score {value}")
        return score

    def _resolve_owner(
        self, caller: TokenClaims, user_id: str | None, player_name: str | None
    ) -> str:
        if not caller.is_admin:
            return caller.subject

        target: User | None
        if user_id:
            target = self.users.find_by_id(user_id)
            if not target:
                raise NotFoundError("Target user not found")
            return target.id
        if player_name:
            target = self.users.find_by_username(player_name)
            if not target:
                raise NotFoundError("Player not found")
            return target.id
        return caller.subject

    def recent_scores(self, user_id: str) -> list[Score]:
        return self.scores.list_for_user(user_id, limit=HISTORY_LIMIT)

    def high_score(self, user_id: str) -> Score | None:
        return self.scores.best_for_user(user_id)
