import os
from typing import Iterator

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine


def _build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    db_user = os.environ["POSTGRES_USER"]
    db_password = os.environ["POSTGRES_PASSWORD"]
    db_name = os.environ["POSTGRES_DB"]
    db_host = os.environ["POSTGRES_HOST"]
    db_port = os.environ["POSTGRES_PORT"]

    return f"postgresql+psycopg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite lives in a single connection
    if ":memory:" in url or url.rstrip("/") in {"sqlite:", "sqlite://"}:
        kwargs["poolclass"] = StaticPool
    return kwargs


DATABASE_URL = _build_database_url()
engine = create_engine(DATABASE_URL, echo=False, **_engine_kwargs(DATABASE_URL))


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
