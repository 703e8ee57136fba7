"""
Database configuration and session management for the flight inventory package.

Supported backends:
- SQLite (default; a file next to the package, or ':memory:' for tests)
- MySQL/MariaDB through pymysql
- PostgreSQL

SQLite connections get PRAGMA foreign_keys=ON so that deleting a flight
cascades to its bookings the same way it does on the server databases.
"""

import os
import logging
from typing import Optional, Dict, Any
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool, QueuePool
from sqlalchemy.exc import SQLAlchemyError
from contextlib import contextmanager
from pathlib import Path

from .models import create_all_tables

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {'mysql': '3306', 'mariadb': '3306', 'postgresql': '5432'}


class DatabaseConfig:
    """
    Engine and session factory for one database URL.

    The engine is created lazily on first use; initialize() may also be
    called explicitly to fail fast on a bad URL.
    """

    def __init__(self, database_url: Optional[str] = None, echo: bool = False):
        """
        Args:
            database_url: Database URL; built from environment variables if omitted
            echo: Log every SQL statement
        """
        self.database_url = database_url or self._build_database_url()
        self.echo = echo
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self._is_initialized = False

        self.db_type = self._detect_database_type()
        self.engine_kwargs = self._get_engine_kwargs()

        logger.info(f"Database configuration created for {self.db_type}")

    @staticmethod
    def _build_database_url() -> str:
        """
        Build the URL from environment variables.

        DATABASE_URL wins outright. Otherwise DB_TYPE (sqlite, mysql, mariadb,
        postgresql) selects the backend and DB_HOST, DB_PORT, DB_NAME, DB_USER
        and DB_PASSWORD fill in the rest.
        """
        database_url = os.getenv('DATABASE_URL')
        if database_url:
            return database_url

        db_type = os.getenv('DB_TYPE', 'sqlite').lower()

        if db_type == 'sqlite':
            db_name = os.getenv('DB_NAME', 'flight_inventory.db')
            return f"sqlite:///{Path(__file__).parent.parent / db_name}"

        if db_type not in _DEFAULT_PORTS:
            raise ValueError(f"Unsupported database type: {db_type}")

        host = os.getenv('DB_HOST', 'localhost')
        port = os.getenv('DB_PORT', _DEFAULT_PORTS[db_type])
        database = os.getenv('DB_NAME', 'flight_inventory')
        password = os.getenv('DB_PASSWORD', '')

        if db_type == 'postgresql':
            username = os.getenv('DB_USER', 'postgres')
            return f"postgresql://{username}:{password}@{host}:{port}/{database}"

        username = os.getenv('DB_USER', 'root')
        return f"mysql+pymysql://{username}:{password}@{host}:{port}/{database}?charset=utf8mb4"

    def _detect_database_type(self) -> str:
        for prefix in ('sqlite', 'mysql', 'postgresql'):
            if self.database_url.startswith(prefix):
                return prefix
        return 'unknown'

    @property
    def is_memory(self) -> bool:
        return self.db_type == 'sqlite' and ':memory:' in self.database_url

    def _get_engine_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {'echo': self.echo, 'pool_pre_ping': True}

        if self.db_type == 'sqlite':
            kwargs['connect_args'] = {'check_same_thread': False, 'timeout': 30}
            if self.is_memory:
                # One shared connection, otherwise every session sees an empty database
                kwargs['poolclass'] = StaticPool

        elif self.db_type in ('mysql', 'postgresql'):
            kwargs.update({
                'poolclass': QueuePool,
                'pool_size': int(os.getenv('DB_POOL_SIZE', '10')),
                'max_overflow': int(os.getenv('DB_MAX_OVERFLOW', '20')),
                'pool_timeout': int(os.getenv('DB_POOL_TIMEOUT', '30')),
                'pool_recycle': int(os.getenv('DB_POOL_RECYCLE', '3600')),
            })

        return kwargs

    def initialize(self) -> None:
        """
        Create the engine and session factory.

        Raises:
            SQLAlchemyError: If the database cannot be reached
        """
        if self._is_initialized:
            return

        try:
            self.engine = create_engine(self.database_url, **self.engine_kwargs)
            # Listeners go on before the first connection; StaticPool reuses it
            self._setup_event_listeners()

            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))

            self.SessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=self.engine,
                expire_on_commit=False,
            )
            self._is_initialized = True
            logger.info(f"Database engine initialized ({self.db_type})")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise SQLAlchemyError(f"Database initialization failed: {e}") from e

    def _setup_event_listeners(self) -> None:
        if self.db_type != 'sqlite':
            return

        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            if not self.is_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    def create_tables(self) -> None:
        """Create any missing tables."""
        self.initialize()
        try:
            create_all_tables(self.engine)
            logger.info("Database tables created")
        except Exception as e:
            logger.error(f"Failed to create tables: {e}")
            raise SQLAlchemyError(f"Table creation failed: {e}") from e

    def get_session(self) -> Session:
        self.initialize()
        return self.SessionLocal()

    @contextmanager
    def get_session_context(self):
        """
        Session scope that commits on success and rolls back on error.

        Usage:
            with db_config.get_session_context() as session:
                FlightRepository(session).add(flight)
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    def test_connection(self) -> bool:
        try:
            self.initialize()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False

    def get_connection_info(self) -> Dict[str, Any]:
        """Connection details with credentials stripped, for display."""
        return {
            'database_type': self.db_type,
            'database_url': self.database_url.split('@')[-1],
            'is_initialized': self._is_initialized,
            'echo_enabled': self.echo,
        }

    def close(self) -> None:
        if self.engine:
            self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self.SessionLocal = None
        self._is_initialized = False


# Global database configuration instance
_db_config: Optional[DatabaseConfig] = None


def get_database_config(database_url: Optional[str] = None, echo: bool = False) -> DatabaseConfig:
    """Get or create the process-wide DatabaseConfig."""
    global _db_config

    if _db_config is None:
        _db_config = DatabaseConfig(database_url=database_url, echo=echo)

    return _db_config


def initialize_database(database_url: Optional[str] = None, echo: bool = False, create_tables: bool = True) -> DatabaseConfig:
    """
    Initialize the process-wide database.

    Args:
        database_url: Optional database URL override
        echo: Enable SQL query logging
        create_tables: Whether to create missing tables

    Returns:
        Initialized DatabaseConfig instance
    """
    db_config = get_database_config(database_url=database_url, echo=echo)
    db_config.initialize()

    if create_tables:
        db_config.create_tables()

    return db_config


__all__ = [
    'DatabaseConfig',
    'get_database_config',
    'initialize_database',
]
