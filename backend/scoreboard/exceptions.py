"""Error kinds surfaced by the scoreboard core.

Each subclass maps to one HTTP status; the app-level handler in
``scoreboard.main`` renders them as ``{"detail": message}``.
"""


class ScoreboardError(Exception):
    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ConflictError(ScoreboardError):
    status_code = 409
    default_message = "Resource conflict"


class UnauthorizedError(ScoreboardError):
    status_code = 401
    default_message = "Unauthorized"

    @property
    def headers(self) -> dict[str, str]:
        return {"WWW-Authenticate": "Bearer"}


class ForbiddenError(ScoreboardError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ScoreboardError):
    status_code = 404
    default_message = "Resource not found"


class TooManyRequestsError(ScoreboardError):
    status_code = 429
    default_message = "Too many requests"

    def __init__(self, retry_after: float, message: str | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)

    @property
    def headers(self) -> dict[str, str]:
        # Retry-After takes whole seconds; never advertise 0 while still blocked
        return {"Retry-After": str(max(1, int(self.retry_after + 0.999)))}


class ValidationError(ScoreboardError):
    status_code = 422
    default_message = "Validation failed"
