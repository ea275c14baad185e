"""Thread-safe connection management for SQLAlchemy + DuckDB.

Two stores live side by side in the data directory:
- data.duckdb: ingested sheet tables plus the "_catalog" table (DuckDB)
- metadata.db: upload history (SQLite via SQLAlchemy)

DuckDB reads go through per-request cursors (each sees a consistent
snapshot); DuckDB writes are serialized through a mutex so a sheet's table
write and its catalog upsert never interleave with another writer.

Usage:
    from sheetsql.core.connections import ConnectionManager, ConnectionConfig

    config = ConnectionConfig.for_directory(Path("./sheetsql_data"))
    manager = ConnectionManager(config)
    manager.initialize()

    with manager.duckdb_cursor() as cursor:
        rows = cursor.execute('SELECT * FROM "_catalog"').fetchall()

    with manager.duckdb_write() as conn:
        conn.execute("CREATE TABLE ...")

    with manager.session_scope() as session:
        session.add(upload)

    manager.close()
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import duckdb
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sheetsql.core.logging import get_logger
from sheetsql.storage import Base

logger = get_logger(__name__)

MEMORY = Path(":memory:")


@dataclass
class ConnectionConfig:
    """Connection configuration for SQLAlchemy and DuckDB.

    Attributes:
        sqlite_path: Path to SQLite database file (upload history)
        duckdb_path: Path to DuckDB database file (tables and catalog)
        pool_size: SQLAlchemy connection pool size
        max_overflow: Maximum overflow connections beyond pool_size
        pool_timeout: Seconds to wait for a connection from pool
        sqlite_timeout: SQLite busy timeout in seconds
        duckdb_memory_limit: DuckDB memory limit (e.g., "2GB")
        echo_sql: Whether to echo SQL statements (for debugging)
    """

    sqlite_path: Path
    duckdb_path: Path

    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: float = 30.0
    sqlite_timeout: float = 30.0

    duckdb_memory_limit: str = "2GB"

    echo_sql: bool = False

    @classmethod
    def for_directory(cls, data_dir: Path, **kwargs: Any) -> ConnectionConfig:
        """Create config for a data directory.

        Args:
            data_dir: Directory for database files
            **kwargs: Override any config attributes

        Returns:
            ConnectionConfig with paths set to data_dir
        """
        return cls(
            sqlite_path=data_dir / "metadata.db",
            duckdb_path=data_dir / "data.duckdb",
            **kwargs,
        )

    @classmethod
    def in_memory(cls, **kwargs: Any) -> ConnectionConfig:
        """Create config for in-memory databases (useful for testing)."""
        return cls(sqlite_path=MEMORY, duckdb_path=MEMORY, **kwargs)


@dataclass
class ConnectionManager:
    """Thread-safe connection management for SQLAlchemy + DuckDB.

    Provides:
    - SQLAlchemy sync session factory (thread-safe)
    - DuckDB read access via cursors (concurrent-safe)
    - DuckDB write access via mutex (serialized)
    - Proper cleanup on close
    """

    config: ConnectionConfig
    _engine: Engine | None = field(default=None, init=False, repr=False)
    _session_factory: sessionmaker[Session] | None = field(default=None, init=False, repr=False)
    _duckdb_conn: duckdb.DuckDBPyConnection | None = field(default=None, init=False, repr=False)
    _write_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _sqlite_commit_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )
    _init_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _initialized: bool = field(default=False, init=False, repr=False)

    def initialize(self) -> None:
        """Initialize connection pools and databases.

        Creates the SQLAlchemy engine, opens DuckDB and makes sure the catalog
        table exists. Safe to call multiple times (idempotent).

        Raises:
            RuntimeError: If initialization fails
        """
        with self._init_lock:
            if self._initialized:
                return

            try:
                self._init_sqlalchemy()
                self._init_duckdb()
                self._initialized = True
            except Exception as e:
                self.close()
                raise RuntimeError(f"Failed to initialize connections: {e}") from e

        logger.info(
            "connections_initialized",
            duckdb_path=str(self.config.duckdb_path),
            sqlite_path=str(self.config.sqlite_path),
        )

    def _init_sqlalchemy(self) -> None:
        """Initialize SQLAlchemy sync engine with connection pool."""
        if self.config.sqlite_path == MEMORY:
            # One shared connection, otherwise every checkout sees an empty database
            self._engine = create_engine(
                "sqlite:///:memory:",
                echo=self.config.echo_sql,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            self.config.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
            self._engine = create_engine(
                f"sqlite:///{self.config.sqlite_path}",
                echo=self.config.echo_sql,
                pool_size=self.config.pool_size,
                max_overflow=self.config.max_overflow,
                pool_timeout=self.config.pool_timeout,
                pool_pre_ping=True,
                connect_args={"check_same_thread": False},
            )

        @event.listens_for(self._engine, "connect")
        def configure_sqlite(dbapi_conn: Any, connection_record: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(f"PRAGMA busy_timeout={int(self.config.sqlite_timeout * 1000)}")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

        self._import_all_models()
        Base.metadata.create_all(self._engine)

        # autoflush=False prevents mid-query writes; we flush at commit time with a lock
        self._session_factory = sessionmaker(
            self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

    def _init_duckdb(self) -> None:
        """Open the DuckDB data store and create the catalog table."""
        from sheetsql.catalog.manager import create_catalog_table

        if self.config.duckdb_path == MEMORY:
            self._duckdb_conn = duckdb.connect(":memory:")
        else:
            self.config.duckdb_path.parent.mkdir(parents=True, exist_ok=True)
            self._duckdb_conn = duckdb.connect(str(self.config.duckdb_path))

        self._duckdb_conn.execute(f"SET memory_limit='{self.config.duckdb_memory_limit}'")
        create_catalog_table(self._duckdb_conn)

    def _import_all_models(self) -> None:
        """Import all DB model modules to register them with SQLAlchemy."""
        from sheetsql.storage import models as _storage  # noqa: F401

    def _ensure_initialized(self) -> None:
        """Raise if not initialized."""
        if not self._initialized:
            raise RuntimeError(
                "ConnectionManager not initialized. Call manager.initialize() first."
            )

    @contextmanager
    def session_scope(self) -> Generator[Session]:
        """Get a session with automatic cleanup and serialized commits.

        Thread-safe: each call creates a new session. Commits are serialized
        via mutex to prevent SQLite lock contention.

        Yields:
            Session from the connection pool

        Raises:
            RuntimeError: If manager not initialized
        """
        self._ensure_initialized()
        assert self._session_factory is not None

        session = self._session_factory()
        try:
            yield session
            with self._sqlite_commit_lock:
                session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def duckdb_cursor(self) -> Generator[duckdb.DuckDBPyConnection]:
        """Get a DuckDB cursor for read operations.

        Cursors from the same connection are thread-safe for reads.
        Use this for SELECT queries that don't modify data.

        Yields:
            DuckDB cursor for read operations

        Raises:
            RuntimeError: If manager not initialized
        """
        self._ensure_initialized()
        assert self._duckdb_conn is not None

        cursor = self._duckdb_conn.cursor()
        try:
            yield cursor
        finally:
            cursor.close()

    @contextmanager
    def duckdb_write(self) -> Generator[duckdb.DuckDBPyConnection]:
        """Get exclusive write access to DuckDB.

        Uses mutex to serialize all write operations. Writes run on their own
        cursor so an open transaction never leaks into read cursors.

        Yields:
            DuckDB cursor with exclusive write access

        Raises:
            RuntimeError: If manager not initialized
        """
        self._ensure_initialized()
        assert self._duckdb_conn is not None

        with self._write_lock:
            cursor = self._duckdb_conn.cursor()
            try:
                yield cursor
            finally:
                cursor.close()

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine.

        Raises:
            RuntimeError: If manager not initialized
        """
        self._ensure_initialized()
        assert self._engine is not None
        return self._engine

    def close(self) -> None:
        """Close all connections and dispose of pools.

        Safe to call multiple times.
        """
        if self._duckdb_conn is not None:
            try:
                self._duckdb_conn.close()
            except duckdb.Error as e:
                logger.warning("duckdb_close_failed", error=str(e))
            self._duckdb_conn = None

        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

        self._session_factory = None
        self._initialized = False


# Process-wide default manager, created on first use
_default_manager: ConnectionManager | None = None
_default_lock = threading.Lock()


def get_connection_manager(
    data_dir: Path | None = None,
    config: ConnectionConfig | None = None,
) -> ConnectionManager:
    """Get or create the default ConnectionManager.

    Creates a singleton manager on first call; later calls return it
    unchanged regardless of arguments.

    Args:
        data_dir: Data directory (used if config not provided)
        config: Full configuration (takes precedence over data_dir)

    Returns:
        Initialized ConnectionManager
    """
    global _default_manager

    with _default_lock:
        if _default_manager is None:
            if config is None:
                if data_dir is None:
                    from sheetsql.core.config import get_settings

                    data_dir = get_settings().data_dir
                config = ConnectionConfig.for_directory(data_dir)

            manager = ConnectionManager(config)
            manager.initialize()
            _default_manager = manager

        return _default_manager


def close_default_manager() -> None:
    """Close the default ConnectionManager if it exists."""
    global _default_manager

    with _default_lock:
        if _default_manager is not None:
            _default_manager.close()
            _default_manager = None


__all__ = [
    "ConnectionConfig",
    "ConnectionManager",
    "get_connection_manager",
    "close_default_manager",
]
