import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from scoreboard.api.auth import router as auth_router
from scoreboard.api.deps import get_password_hasher
from scoreboard.api.scores import router as scores_router
from scoreboard.config import settings
from scoreboard.database import engine, init_db
from scoreboard.exceptions import ScoreboardError
from scoreboard.logging_config import configure_logging
from scoreboard.models.user import User, UserRole
from scoreboard.repositories import UserRepository

logger = logging.getLogger(__name__)
http_logger = logging.getLogger("scoreboard.http")


def _bootstrap_admin() -> None:
    username = settings.bootstrap_admin_username
    password = settings.bootstrap_admin_password
    if not username or not password:
        return
    with Session(engine) as session:
        users = UserRepository(session)
        if users.find_by_username(username):
            return
        users.create(
            User(
                username=username,
                password_hash=get_password_hasher().hash(password),
                role=UserRole.ADMIN,
            )
        )
        logger.info(f"Created bootstrap admin {username}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    init_db()
    _bootstrap_admin()
    yield


app = FastAPI(title="Scoreboard", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    client = request.client.host if request.client else "-"
    try:
        response = await call_next(request)
    except Exception:
        duration = (time.perf_counter() - start) * 1000
        http_logger.exception(
            f"{client} - {request.method} {request.url.path} 500 - {duration:.1f}ms"
        )
        raise
    duration = (time.perf_counter() - start) * 1000
    http_logger.info(
        f"{client} - {request.method} {request.url.path} "
        f"{response.status_code} - {duration:.1f}ms"
    )
    return response


@app.exception_handler(ScoreboardError)
async def scoreboard_error_handler(request: Request, exc: ScoreboardError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=exc.headers,
    )


app.include_router(auth_router, prefix="/api")
app.include_router(scores_router, prefix="/api")


@app.get("/health")
async def health():
    return {"status": "ok"}
