from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from scoreboard.api.deps import get_auth_service, limit_by_client
from scoreboard.config import settings
from scoreboard.exceptions import ForbiddenError
from scoreboard.models.user import User, UserRole
from scoreboard.services.auth_service import AuthService

router = APIRouter(
    prefix="/auth", tags=["auth"], dependencies=[Depends(limit_by_client)]
)


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(min_length=6, max_length=72)
    role: UserRole | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class UserSummary(BaseModel):
    id: str
    username: str
    role: UserRole


class AuthResponse(BaseModel):
    message: str
    user: UserSummary
    access_token: str
    token_type: str = "bearer"


def _auth_response(message: str, user: User, token: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        user=UserSummary(id=user.id, username=user.username, role=user.role),
        access_token=token,
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest, auth: AuthService = Depends(get_auth_service)
):
    if body.role == UserRole.ADMIN and not settings.allow_admin_registration:
        raise ForbiddenError("Admin self-registration is disabled")
    user, token = auth.register(body.username, body.password, body.role)
    return _auth_response("User registered successfully", user, token)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.login(body.username, body.password)
    return _auth_response("Login successful", user, token)
