# contribution_ledger/db.py
"""Database session and connection management"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

from contribution_ledger.config import settings
from contribution_ledger.models.db import Base

logger = logging.getLogger(__name__)

class Database:
    """Database connection and session manager"""

    def __init__(self):
        """Initialize database manager state"""
        self._engine = None
        self._SessionLocal = None

    def _get_connection_string(self, url: Optional[str]) -> str:
        """
        Resolve the database URL, falling back to the configured one.

        Raises:
            ValueError: If no URL is configured
        """
        if url:
            return url

        if not settings.DATABASE_URL:
            logger.error("Failed to initialize database connection: DATABASE_URL is empty")
            raise ValueError("DATABASE_URL setting is required")
        return settings.DATABASE_URL

    def init(self, url: Optional[str] = None) -> None:
        """
        Initialize database connection and create tables.

        This should be called once at application startup.

        Args:
            url: SQLAlchemy URL, defaults to settings.DATABASE_URL

        Raises:
            SQLAlchemyError: If database initialization fails
        """
        try:
            connection_string = self._get_connection_string(url)
            self._engine = create_engine(connection_string)
            Base.metadata.create_all(self._engine)
            self._SessionLocal = sessionmaker(bind=self._engine)
            logger.info("Database initialized successfully")

        except SQLAlchemyError as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Session scoped to one ledger command.

        StorageService commits each write itself; anything left pending when
        the command fails is rolled back before the session closes.

        Raises:
            RuntimeError: If database not initialized
        """
        if not self._SessionLocal:
            raise RuntimeError("Database not initialized. Call init() first.")

        session = self._SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """
        Clean up database connections.
        Should be called during application shutdown.
        """
        if self._engine:
            self._engine.dispose()
            self._engine = None
            self._SessionLocal = None

# Global database instance
db = Database()
