"""
Database handle and session management.

The application lifespan builds one ``Database`` and stores it on
``app.state.database``; request handlers receive sessions from it through
the ``get_db`` dependency.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from image_checker.exceptions import StorageError
from image_checker.utils.logger import get_logger

logger = get_logger(__name__)

# Base class for ORM models
Base = declarative_base()


def utc_now() -> datetime:
    """Timezone-aware current time, used as the default for timestamp columns."""
    return datetime.now(timezone.utc)


class Database:
    """
    Owns the SQLAlchemy engine and session factory for one process.

    Connection timeouts are configured per backend so a request waiting on an
    unreachable database fails instead of hanging.
    """

    def __init__(self, url: str, pool_timeout: int = 10, statement_timeout_ms: int = 15000, echo: bool = False) -> None:
        self.url = make_url(url)
        self.engine = create_engine(
            self.url,
            echo=echo,
            **self._engine_options(pool_timeout, statement_timeout_ms)
        )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def _engine_options(self, pool_timeout: int, statement_timeout_ms: int) -> Dict[str, Any]:
        backend = self.url.get_backend_name()

        if backend == "sqlite":
            # In-memory databases only exist for the lifetime of one connection
            if self.url.database in (None, "", ":memory:"):
                return {
                    "connect_args": {"check_same_thread": False},
                    "poolclass": StaticPool,
                }
            return {
                "connect_args": {"check_same_thread": False, "timeout": pool_timeout},
            }

        options: Dict[str, Any] = {
            "pool_pre_ping": True,  # Reconnect after the database comes back
            "pool_recycle": 300,
            "pool_timeout": pool_timeout,
        }
        if backend == "postgresql":
            options["connect_args"] = {
                "connect_timeout": pool_timeout,
                "options": f"-c statement_timeout={statement_timeout_ms}",
            }
        return options

    def session(self) -> Generator[Session, None, None]:
        """
        Yield a session that is rolled back on error and always closed.

        Yields:
            Database session bound to this handle's engine
        """
        db = self.SessionLocal()
        try:
            yield db
        except Exception as e:
            logger.error("Database session error", error=str(e))
            db.rollback()
            raise
        finally:
            db.close()

    def init(self) -> None:
        """
        Verify connectivity and create all tables.

        Raises:
            StorageError: If the database cannot be reached
        """
        # Imported for their side effect of registering tables on Base
        from image_checker.models import check_result, face  # noqa: F401

        try:
            logger.info("Initializing database", backend=self.url.get_backend_name())
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=self.engine)
            logger.info("Database tables initialized successfully")
        except SQLAlchemyError as e:
            logger.error("Failed to initialize database", error=str(e))
            raise StorageError(f"Cannot connect to database: {e}") from e

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
        logger.info("Database connections closed")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency to get a database session from the application's handle.

    Yields:
        Database session that is automatically closed after use
    """
    database: Database = request.app.state.database
    yield from database.session()
