from typing import Iterator

from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

from . import models  # noqa: F401  registers tables on SQLModel.metadata
from .config import DATABASE_URL, SQL_ECHO


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite leaves foreign keys off per connection; PostgreSQL always checks them.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str = DATABASE_URL, echo: bool = SQL_ECHO, **engine_kwargs):
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(url, echo=echo, connect_args=connect_args, **engine_kwargs)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


# ----- DB setup -----
engine = make_engine()


def create_db_and_tables(bind=None):
    SQLModel.metadata.create_all(bind or engine)


def get_session() -> Iterator[Session]:
    """One session per request, closed when the request finishes."""
    with Session(engine) as session:
        yield session
