from dataclasses import dataclass

from scoreboard.auth import TokenClaims
from scoreboard.exceptions import ForbiddenError


@dataclass(frozen=True)
class OwnershipDecision:
    allowed: bool
    reason: str | None = None


ALLOW = OwnershipDecision(allowed=True)


def check_score_ownership(
    caller: TokenClaims,
    user_id: str | None = None,
    player_name: str | None = None,
) -> OwnershipDecision:
    """Decide whether ``caller`` may attribute a score to the given target.

    Admins may submit for anyone; which user that is gets resolved later by
    the submission workflow. Everyone else may only target themselves.
    """
    if caller.is_admin:
        return ALLOW
    if user_id and user_id != caller.subject:
        return OwnershipDecision(False, "You can only submit scores for yourself")
    if player_name and player_name != caller.username:
        return OwnershipDecision(False, "Player name must match your username")
    return ALLOW


def enforce_score_ownership(
    caller: TokenClaims,
    user_id: str | None = None,
    player_name: str | None = None,
) -> None:
    decision = check_score_ownership(caller, user_id, player_name)
    if not decision.allowed:
        raise ForbiddenError(decision.reason)
