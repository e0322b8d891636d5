from dataclasses import dataclass
from datetime import datetime

from scoreboard.exceptions import ValidationError
from scoreboard.repositories import ScoreRepository


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    player_name: str
    score: int
    achieved_at: datetime


@dataclass
class _Best:
    player_name: str
    score: int
    achieved_at: datetime


class LeaderboardService:
    def __init__(self, scores: ScoreRepository, max_limit: int = 100):
        self.scores = scores
        self.max_limit = max_limit

    def top_scores(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Rank users by their best score.

        A user's ``achieved_at`` is when they first reached their best.
        Equal bests are ordered by who got there first, then by name.
        Ranks are positional, so equal scores still get distinct ranks.
        """
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError("Limit must be an integer")
        if limit < 1 or limit > self.max_limit:
            raise ValidationError(f"Limit must be between 1 and {self.max_limit}")

        best: dict[str, _Best] = {}
        for score, username in self.scores.iter_with_owner():
            current = best.get(score.user_id)
            if (
                current is None
                or score.score > current.score
                or (score.score == current.score and score.created_at < current.achieved_at)
            ):
                best[score.user_id] = _Best(username, score.score, score.created_at)

        ranked = sorted(
            best.values(),
            key=lambda b: (-b.score, b.achieved_at, b.player_name),
        )
        return [
            LeaderboardEntry(
                rank=position,
                player_name=entry.player_name,
                score=entry.score,
                achieved_at=entry.achieved_at,
            )
            for position, entry in enumerate(ranked[:limit], start=1)
        ]
