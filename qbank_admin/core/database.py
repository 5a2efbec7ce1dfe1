import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from fastapi import Depends, Request
from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from qbank_admin.models.orm import Base

logger = logging.getLogger(__name__)


class SchemaNotReady(Exception):
    """The store is reachable but not provisioned: no URL, or tables/columns missing."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def _enable_sqlite_fks(dbapi_conn, _record):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def make_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, future=True, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_fks)
        return engine
    return create_engine(url, echo=echo, future=True, pool_pre_ping=True)


class Store:
    """Process-wide database handle, built at startup and passed to handlers."""

    def __init__(self, url: Optional[str], echo: bool = False):
        self.url = url
        self.engine: Optional[Engine] = make_engine(url, echo) if url else None
        self._sessions = (
            sessionmaker(bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False, future=True)
            if self.engine is not None else None
        )

    @property
    def configured(self) -> bool:
        return self.engine is not None

    def missing_schema(self) -> List[str]:
        """Tables and ``table.column`` names the live database lacks."""
        if self.engine is None:
            return list(Base.metadata.tables)
        try:
            insp = inspect(self.engine)
            missing = []
            for name, table in Base.metadata.tables.items():
                if not insp.has_table(name):
                    missing.append(name)
                    continue
                present = {c["name"] for c in insp.get_columns(name)}
                missing.extend(f"{name}.{c.name}" for c in table.columns if c.name not in present)
            return missing
        except DBAPIError as e:
            # Unreachable database is a hard failure, not a missing schema
            logger.error(f"Schema inspection failed: {e}")
            return []

    @contextmanager
    def session(self) -> Iterator[Session]:
        if self._sessions is None:
            raise SchemaNotReady("DATABASE_URL is not configured")
        db = self._sessions()
        try:
            yield db
        except DBAPIError as e:
            db.rollback()
            missing = self.missing_schema()
            if missing:
                raise SchemaNotReady(f"missing schema objects: {', '.join(missing)}") from e
            raise
        finally:
            db.close()

    @contextmanager
    def snapshot(self) -> Iterator[Session]:
        """Session whose reads all run inside one transaction."""
        with self.session() as db:
            with db.begin():
                yield db

    def create_all(self) -> None:
        if self.engine is None:
            raise SchemaNotReady("DATABASE_URL is not configured")
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        if self.engine is None:
            raise SchemaNotReady("DATABASE_URL is not configured")
        Base.metadata.drop_all(self.engine)

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_db(store: Store = Depends(get_store)) -> Iterator[Session]:
    with store.session() as db:
        yield db
