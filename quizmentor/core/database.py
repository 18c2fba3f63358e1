"""
Database configuration and session management
Handles engine creation, sessions and optimistic-lock aware commits
"""

import logging
import time
from typing import Generator

import sentry_sdk
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from quizmentor.core.config import settings
from quizmentor.core.deadline import current_deadline
from quizmentor.core.exceptions import ConcurrentUpdateException, RequestTimeoutException

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """Create an engine suited to the configured backend"""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # In-memory databases live on a single shared connection
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(database_url, echo=settings.DEBUG, **kwargs)
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
        echo=settings.DEBUG,
    )


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = build_engine(settings.get_database_url())

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(bind: Engine = engine) -> None:
    """Initialize database, create tables if they don't exist"""
    try:
        # Import all models here to ensure they're registered
        from quizmentor import models  # noqa: F401

        Base.metadata.create_all(bind=bind)
        logger.info("Database tables created successfully")

        with bind.connect() as conn:
            if conn.execute(text("SELECT 1")).scalar() == 1:
                logger.info("Database connection successful")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session
    Ensures proper cleanup after request
    """
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Database error occurred: {e}")
        db.rollback()
        if settings.SENTRY_DSN:
            sentry_sdk.capture_exception(e)
        raise
    finally:
        db.close()


def commit(db: Session) -> None:
    """
    Commit the session inside the current request's deadline.

    Raises:
        RequestTimeoutException: If the request is past its deadline; the
            session is rolled back and nothing is written
    """
    deadline = current_deadline()
    if deadline is None:
        db.commit()
        return

    try:
        with deadline.commit_window():
            db.commit()
    except RequestTimeoutException:
        db.rollback()
        logger.warning("Commit skipped, request deadline has passed")
        raise


def commit_or_conflict(db: Session, resource: str = "User") -> None:
    """
    Commit the session, translating lost-update races into a retryable error.

    Rows mapped with a version counter are written with
    ``UPDATE ... WHERE version_id = :expected``; if another request committed
    first the update matches nothing and SQLAlchemy raises StaleDataError.
    Unique-constraint violations on child rows written by the same race
    surface the same way.
    """
    try:
        commit(db)
    except (StaleDataError, IntegrityError) as e:
        db.rollback()
        logger.warning(f"Concurrent update detected on {resource}: {e}")
        raise ConcurrentUpdateException(resource=resource)


class DatabaseHealthCheck:
    """Database health check utility"""

    @staticmethod
    def check_connection(bind: Engine = engine) -> dict:
        """Check database connection health"""
        start_time = time.time()
        try:
            with bind.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "healthy", "response_time": time.time() - start_time}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e),
                "response_time": time.time() - start_time,
            }
