# student_invoice/core/db.py - SQLAlchemy database setup for the local record store
from sqlalchemy import create_engine, text, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from typing import Generator, Optional
import logging
import threading

from student_invoice.core.config import settings

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Database manager owning the engine and session factory"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.DATABASE_URL
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def initialize(self):
        """Initialize database engine and session maker"""
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return

            try:
                self.engine = self._create_engine()
                self.SessionLocal = sessionmaker(
                    autocommit=False,
                    autoflush=False,
                    expire_on_commit=False,
                    bind=self.engine
                )
                self._setup_event_listeners()
                self._test_connection()

                self._initialized = True
                logger.info("Database initialized successfully")

            except Exception as e:
                logger.error(f"Failed to initialize database: {e}")
                raise

    def _create_engine(self) -> Engine:
        """Create SQLAlchemy engine"""
        engine_args = {
            "url": self.database_url,
            "echo": settings.DATABASE_ECHO,
            "future": True,
        }

        if self.is_sqlite:
            # A single shared connection keeps in-memory databases alive
            engine_args.update({
                "poolclass": StaticPool,
                "connect_args": {
                    "check_same_thread": False,
                    "timeout": 30,
                },
            })
        else:
            engine_args.update({
                "pool_pre_ping": True,
                "connect_args": {"connect_timeout": 10},
            })

        return create_engine(**engine_args)

    def _setup_event_listeners(self):
        """Set up SQLAlchemy event listeners"""

        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Set SQLite pragmas for reliability of the local store"""
            if self.is_sqlite:
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute("PRAGMA synchronous=NORMAL")
                cursor.close()

    def _test_connection(self):
        """Test database connection and log status"""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            if self.is_sqlite:
                version = conn.execute(text("SELECT sqlite_version()")).fetchone()
                logger.info(f"Connected to SQLite: {version[0]}")

    def create_tables(self):
        """Create all tables that do not exist yet"""
        # Imported here so every model registers on Base.metadata
        from student_invoice.models import Base

        if not self._initialized:
            self.initialize()
        Base.metadata.create_all(bind=self.engine)

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get database session with automatic cleanup and error handling.

        Yields:
            Session: SQLAlchemy database session
        """
        if not self._initialized:
            self.initialize()

        session = self.SessionLocal()
        try:
            yield session
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def health_check(self) -> dict:
        """Perform database health check"""
        try:
            if not self._initialized:
                self.initialize()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}

    def close(self):
        """Close database connections and cleanup"""
        if self.engine:
            self.engine.dispose()
            logger.info("Database connections closed")


# Create global database manager instance
db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency to get database session.

    Usage in FastAPI:
        @router.get("/templates")
        def list_templates(db: Session = Depends(get_db)):
            ...
    """
    yield from db_manager.get_session()


def health_check() -> dict:
    """Get database health status (convenience function)"""
    return db_manager.health_check()


__all__ = [
    "DatabaseManager",
    "db_manager",
    "get_db",
    "health_check",
]
