import logging

from scoreboard.auth import PasswordHasher, TokenClaims, TokenIssuer
from scoreboard.exceptions import ConflictError, UnauthorizedError
from scoreboard.models.user import User, UserRole
from scoreboard.repositories import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login and bearer-token checks."""

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ):
        self.users = users
        self.hasher = hasher
        self.issuer = issuer

    def register(
        self, username: str, password: str, role: UserRole | None = None
    ) -> tuple[User, str]:
        if self.users.find_by_username(username):
            raise ConflictError("Username already exists")

        user = User(
            username=username,
            password_hash=self.hasher.hash(password),
            role=role or UserRole.USER,
        )
        # create() maps a lost unique-index race to the same ConflictError
        user = self.users.create(user)
        logger.info(f"Registered user {user.username} ({user.role.value})")
        return user, self.issuer.issue(user)

    def login(self, username: str, password: str) -> tuple[User, str]:
        user = self.validate_user(username, password)
        if not user:
            logger.info(f"Failed login for {username}")
            raise UnauthorizedError("Invalid credentials")
        return user, self.issuer.issue(user)

    def validate_user(self, username: str, password: str) -> User | None:
        """Return the active user matching the credentials, or None.

        Unknown, inactive and wrong-password cases are indistinguishable to
        the caller.
        """
        user = self.users.find_by_username(username, active_only=True)
        if not user:
            return None
        if not self.hasher.verify(password, user.password_hash):
            return None
        return user

    def authenticate(self, token: str) -> TokenClaims:
        return self.issuer.verify(token)
