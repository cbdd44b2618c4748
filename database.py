"""
Database management layer.

Provides abstraction for database connections, sessions, and health checks.
The process entry point owns the single DatabaseManager instance; request
handlers reach it through the FastAPI application state.
"""

from contextlib import contextmanager
from typing import Generator, Optional
from fastapi import Request
from sqlalchemy import create_engine, event, text, Engine
from sqlalchemy.orm import sessionmaker, Session
from config import Settings
from shared.models.entities import Base
import logging

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    Manages database connections and sessions.

    Provides:
    - Engine creation with connection pooling
    - Session factory
    - Schema creation
    - Health checks
    - Context managers for transactions
    """

    def __init__(self, settings: Settings):
        """Initialize the database manager with explicit settings."""
        self.settings = settings
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        """
        Get or create the SQLAlchemy engine.

        Returns:
            Engine: SQLAlchemy engine instance
        """
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """
        Get or create the session factory.

        Returns:
            sessionmaker: Session factory
        """
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False
            )
        return self._session_factory

    @property
    def is_sqlite(self) -> bool:
        return str(self.settings.database_url).startswith("sqlite")

    def _create_engine(self) -> Engine:
        """
        Create SQLAlchemy engine with backend-specific settings.

        Returns:
            Engine: Configured SQLAlchemy engine
        """
        url = str(self.settings.database_url)
        logger.info(f"Creating database engine for: {self._mask_password(url)}")

        if self.is_sqlite:
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                echo=self.settings.log_level == "DEBUG",
            )
            configure_sqlite_engine(engine)
        else:
            engine = create_engine(
                url,
                pool_size=self.settings.db_pool_size,
                max_overflow=self.settings.db_max_overflow,
                pool_timeout=self.settings.db_pool_timeout,
                pool_pre_ping=True,  # Verify connections before using
                echo=self.settings.log_level == "DEBUG",  # SQL logging
            )

        logger.info("Database engine created successfully")
        return engine

    def create_tables(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ensured")

    def get_session(self) -> Session:
        """
        Create a new database session.

        Returns:
            Session: SQLAlchemy session
        """
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for database operations.

        Usage:
            with db_manager.session_scope() as session:
                session.query(Model).all()

        Yields:
            Session: Database session

        Raises:
            Exception: Re-raises any exception after rolling back
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database transaction failed: {e}")
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        """
        Check database connectivity.

        Returns:
            bool: True if database is accessible, False otherwise
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database health check passed")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def close(self):
        """Close the database engine and dispose of connections."""
        if self._engine:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine closed")

    @staticmethod
    def _mask_password(url: str) -> str:
        """
        Mask the password in a database URL for logging.

        Args:
            url: Database URL

        Returns:
            str: URL with password masked
        """
        if "@" in url and ":" in url:
            parts = url.split("@")
            if len(parts) == 2:
                credentials = parts[0]
                if ":" in credentials:
                    user_pass = credentials.split(":")
                    if len(user_pass) >= 2:
                        # Keep protocol and user, mask password
                        return f"{':'.join(user_pass[:-1])}:****@{parts[1]}"
        return url


def configure_sqlite_engine(engine: Engine) -> None:
    """
    Turn on foreign keys (cascades depend on them) and take over transaction
    BEGIN from pysqlite so SAVEPOINTs nest inside a real transaction.
    """
    event.listen(engine, "connect", _on_sqlite_connect)
    event.listen(engine, "begin", _on_sqlite_begin)


def _on_sqlite_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


def get_db_manager(request: Request) -> DatabaseManager:
    """Return the DatabaseManager the entry point attached to the app."""
    db_manager: Optional[DatabaseManager] = getattr(request.app.state, "db_manager", None)
    if db_manager is None:
        raise RuntimeError("DatabaseManager is not initialized; start the app through main.create_app()")
    return db_manager


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency injection for FastAPI endpoints.

    Usage:
        @router.get("/")
        def endpoint(db: Session = Depends(get_db)):
            return db.query(Model).all()

    Yields:
        Session: Database session
    """
    session = get_db_manager(request).get_session()
    try:
        yield session
    finally:
        session.close()
