from collections.abc import Generator

from sqlmodel import Session, SQLModel, create_engine

from scoreboard.config import settings

engine = create_engine(settings.database_url, echo=False)


def init_db() -> None:
    import scoreboard.models  # noqa: F401  register all models with SQLModel metadata

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
