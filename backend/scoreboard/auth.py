from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from scoreboard.exceptions import UnauthorizedError, ValidationError
from scoreboard.models.user import User, UserRole

ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        encoded = password.encode()
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), hashed.encode())
        except ValueError:
            # Malformed or truncated digest
            return False


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    username: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class TokenIssuer:
    def __init__(self, secret_key: str, expire_minutes: int):
        self._secret_key = secret_key
        self._ttl = timedelta(minutes=expire_minutes)

    def issue(self, user: User) -> str:
        issued_at = datetime.now(UTC)
        return jwt.encode(
            {
                "sub": str(user.id),
                "username": user.username,
                "role": UserRole(user.role).value,
                "iat": issued_at,
                "exp": issued_at + self._ttl,
            },
            self._secret_key,
            algorithm=ALGORITHM,
        )

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
            return TokenClaims(
                subject=str(payload["sub"]),
                username=str(payload["username"]),
                role=UserRole(payload["role"]),
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (JWTError, KeyError, TypeError, ValueError):
            raise UnauthorizedError("Invalid token")
