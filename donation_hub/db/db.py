import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# table classes must be imported before create_all
from donation_hub import models  # noqa: F401

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and hands out sessions.

    Mutating operations go through ``write_session`` which holds a
    process-wide lock, so transitions on the same rows never interleave.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        kwargs = {"echo": echo}

        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, otherwise every session sees an empty db
                kwargs["poolclass"] = StaticPool

        self.engine = create_engine(url, **kwargs)
        self._write_lock = threading.RLock()

    def create_db_and_tables(self) -> None:
        SQLModel.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session

    @contextmanager
    def write_session(self) -> Iterator[Session]:
        # anything not committed is rolled back when the session closes
        with self._write_lock:
            with Session(self.engine) as session:
                yield session

    def dispose(self) -> None:
        logger.debug("Disposing engine for %s", self.url)
        self.engine.dispose()

