from collections.abc import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from scoreboard.auth import PasswordHasher, TokenClaims, TokenIssuer
from scoreboard.config import settings
from scoreboard.database import get_session
from scoreboard.exceptions import UnauthorizedError
from scoreboard.repositories import ScoreRepository, UserRepository
from scoreboard.services.auth_service import AuthService
from scoreboard.services.leaderboard import LeaderboardService
from scoreboard.services.rate_limit import (
    DEFAULT,
    SCORE_SUBMIT,
    FixedWindowRateLimiter,
    RateLimitRule,
)
from scoreboard.services.scores import ScoreService

security = HTTPBearer(auto_error=False)

rate_limiter = FixedWindowRateLimiter(
    default_rule=RateLimitRule(
        limit=settings.rate_limit_default_limit,
        window_seconds=settings.rate_limit_default_window_seconds,
    ),
    rules={
        SCORE_SUBMIT: RateLimitRule(
            limit=settings.rate_limit_submit_limit,
            window_seconds=settings.rate_limit_submit_window_seconds,
        ),
    },
)


def get_rate_limiter() -> FixedWindowRateLimiter:
    return rate_limiter


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(settings.secret_key, settings.access_token_expire_minutes)


def get_auth_service(
    session: Session = Depends(get_session),
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(UserRepository(session), hasher, issuer)


def get_score_service(session: Session = Depends(get_session)) -> ScoreService:
    return ScoreService(UserRepository(session), ScoreRepository(session))


def get_leaderboard_service(
    session: Session = Depends(get_session),
) -> LeaderboardService:
    return LeaderboardService(
        ScoreRepository(session), max_limit=settings.leaderboard_max_limit
    )


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth: AuthService = Depends(get_auth_service),
) -> TokenClaims:
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    return auth.authenticate(credentials.credentials)


def _client_address(request: Request) -> str:
    # X-Forwarded-For is client-controlled unless a proxy in front rewrites it
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and settings.trust_forwarded_for:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def limit_by_client(
    request: Request,
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> None:
    """Default rate limit for anonymous endpoints, keyed by client address."""
    limiter.check(f"client:{_client_address(request)}", DEFAULT)


def limited_caller(endpoint_class: str) -> Callable[..., TokenClaims]:
    """Build a dependency that authenticates, then rate-limits per user."""

    async def dependency(
        caller: TokenClaims = Depends(get_current_caller),
        limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    ) -> TokenClaims:
        limiter.check(f"user:{caller.subject}", endpoint_class)
        return caller

    return dependency


current_caller = limited_caller(DEFAULT)
submitting_caller = limited_caller(SCORE_SUBMIT)
