"""Engine construction, schema creation and session helpers"""

import os
from collections.abc import Iterator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

import blockpress.crud.models  # noqa: F401  (registers tables on SQLModel.metadata)


DEFAULT_DB_URL = "sqlite:///blockpress.db"


def get_url(explicit: str | None = None) -> str:
    """Return explicit, else BLOCKPRESS_DB_URL, else the SQLite default."""
    if explicit:
        return explicit
    return os.getenv("BLOCKPRESS_DB_URL") or DEFAULT_DB_URL


def make_engine(db_url: str) -> Engine:
    return create_engine(db_url, echo=False)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def get_session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session
