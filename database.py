from typing import Generator

from sqlalchemy import event
from sqlmodel import SQLModel, Session, create_engine

from core.config import settings

DATABASE_URL = settings.DATABASE_URL


def build_engine(url: str, **kwargs):
    """
    Create an engine for ``url``.
    SQLite needs foreign keys switched on per connection, otherwise
    ON DELETE CASCADE on role_permissions is silently ignored.
    """
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    new_engine = create_engine(url, echo=False, connect_args=connect_args, **kwargs)

    if is_sqlite:
        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(DATABASE_URL)


def create_db_and_tables() -> None:
    # Register every table on SQLModel.metadata before create_all
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
