import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# Base class for all database models
# All models inherit from this to get SQLAlchemy ORM functionality
Base = declarative_base()


class Database:
    """
    Handle on the relational store.

    Owns the SQLAlchemy engine (and therefore the connection pool) plus the
    session factory. One instance is created at application startup and
    closed at shutdown; request handlers reach it through app.state.
    """

    def __init__(self, url: str, *, production: bool = False, echo: bool = False, **engine_kwargs: Any):
        connect_args = dict(engine_kwargs.pop("connect_args", {}))
        # Production traffic to PostgreSQL must be encrypted
        if production and url.startswith("postgresql"):
            connect_args.setdefault("sslmode", "require")

        # Engine manages the connection pool, shared by every request
        self.engine = create_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            connect_args=connect_args,
            **engine_kwargs,
        )
        # autoflush=False: Don't auto-flush before queries
        self.SessionLocal = sessionmaker(autoflush=False, bind=self.engine)
        self._closed = False

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(settings.DATABASE_URL, production=settings.is_production)

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Database handle is closed")

    def execute(self, statement: str, params: Optional[Mapping[str, Any]] = None) -> list[dict]:
        """
        Run a textual statement with bound parameters and return rows as dicts.

        Values are always sent as bind parameters (":name" placeholders) and
        never formatted into the SQL text.
        """
        self._ensure_open()
        with self.engine.begin() as connection:
            result = connection.execute(text(statement), dict(params or {}))
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

    def session(self) -> Iterator[Session]:
        """
        Yield one ORM session and always close it.

        Used as the body of the get_db FastAPI dependency.
        """
        self._ensure_open()
        db = self.SessionLocal()
        try:
            yield db
        finally:
            # Prevents connection leaks, rolls back anything uncommitted
            db.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on any error"""
        self._ensure_open()
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_all(self) -> None:
        """Create tables for every model (local development and tests)"""
        # Models register themselves on Base.metadata when imported
        from civic_intake.models import complaint, user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        """Dispose of the connection pool; the handle can not be used afterwards"""
        if self._closed:
            return
        self.engine.dispose()
        self._closed = True
        logger.info("Database connection pool closed")
