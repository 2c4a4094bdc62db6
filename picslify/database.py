"""Database handle: engine lifecycle and sessions."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from fastapi import Request
from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel registers them
import picslify.models  # noqa: F401

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Explicitly constructed persistence handle.

    Owned by whoever builds it (the app lifespan, or a test) and passed
    to the code that needs it; there is no module-level engine.
    """

    def __init__(self, db_path: Path, echo: bool = False):
        self.db_path = db_path
        self.engine = create_engine(
            f"sqlite:///{db_path}",
            echo=echo,
            connect_args={"check_same_thread": False},
        )
        event.listen(self.engine, "connect", _enable_foreign_keys)

    def init(self) -> None:
        """Create all tables and enable WAL mode."""
        SQLModel.metadata.create_all(self.engine)

        with self.engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL")
            conn.exec_driver_sql("PRAGMA synchronous=NORMAL")
            conn.commit()
        logger.info("Database ready at %s", self.db_path)

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session


def get_session(request: Request) -> Iterator[Session]:
    """FastAPI dependency: yields a session from the app's database handle."""
    db: Database = request.app.state.db
    with db.session() as session:
        yield session
