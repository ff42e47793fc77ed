import logging
from contextlib import contextmanager
from typing import Generator, Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from artefact.db.base import Base

logger = logging.getLogger("artefact.db.session")


class Database:
    """Owns the engine and session factory for one database URL.

    Construct it, call ``connect()`` before handing out sessions and
    ``close()`` on shutdown.
    """

    def __init__(self, url: str, echo: bool = False):
        if not url:
            raise RuntimeError("DATABASE_URL is not configured.")
        self.url = url
        self.echo = echo
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def connect(self) -> None:
        if self.engine is not None:
            return
        logger.info("Connecting database (sqlite=%s)", self.is_sqlite)

        kwargs = {"echo": self.echo, "pool_pre_ping": True}
        if self.is_sqlite:
            # SQLite requires check_same_thread=False for FastAPI (multi-threaded)
            kwargs["connect_args"] = {"check_same_thread": False}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, otherwise every checkout sees an empty database
                kwargs["poolclass"] = StaticPool

        self.engine = create_engine(self.url, **kwargs)

        if self.is_sqlite:
            @event.listens_for(self.engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        # Import all models to ensure they're registered with Base
        import artefact.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Database connection closed")

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not connected; call connect() first.")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        db = self.session()
        try:
            yield db
        finally:
            db.close()


def get_db(request: Request) -> Generator:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or nothing at all."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
