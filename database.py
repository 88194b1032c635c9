import logging
import queue
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONNECTIONS = 10

CREATE_BOOKS_TABLE = """
    CREATE TABLE IF NOT EXISTS books(
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT,
        isbn INTEGER,
        author TEXT,
        release INTEGER
    )
"""


class StorageError(Exception):
    """Raised when a statement against the books store fails."""


class DatabaseInitError(StorageError):
    """Raised when the database file cannot be opened or the schema cannot be created."""


class ConnectionPool:
    """Thread-safe pool of SQLite connections capped at ``max_connections``.

    Connections are opened lazily. Once the cap is reached, callers wait for a
    connection to be returned; there is no timeout.
    """

    def __init__(self, db_file: str, max_connections: int = DEFAULT_MAX_CONNECTIONS) -> None:
        if max_connections < 1:
            raise ValueError("max_connections must be at least 1")
        self.db_file = db_file
        self.max_connections = max_connections
        self._idle: "queue.Queue[sqlite3.Connection]" = queue.Queue()
        self._lock = threading.Lock()
        self._opened = 0

    @property
    def opened(self) -> int:
        """Number of connections currently open (idle or in use)."""
        return self._opened

    def _connect(self) -> sqlite3.Connection:
        # FastAPI runs sync endpoints on worker threads, so connections cross threads
        conn = sqlite3.connect(self.db_file, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def acquire(self) -> sqlite3.Connection:
        try:
            return self._idle.get_nowait()
        except queue.Empty:
            pass

        with self._lock:
            if self._opened < self.max_connections:
                conn = self._connect()
                self._opened += 1
                logger.debug("Opened connection %d/%d to %s", self._opened, self.max_connections, self.db_file)
                return conn

        return self._idle.get()

    def release(self, conn: sqlite3.Connection) -> None:
        self._idle.put(conn)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.acquire()
        try:
            yield conn
        except Exception:
            # Never hand a connection with an open transaction back to the pool
            conn.rollback()
            raise
        finally:
            self.release(conn)

    def close(self) -> None:
        """Close every idle connection. Connections still checked out are left alone."""
        with self._lock:
            while True:
                try:
                    conn = self._idle.get_nowait()
                except queue.Empty:
                    break
                conn.close()
                self._opened -= 1


class Database:
    """Owns the connection pool and the ``books`` schema."""

    def __init__(self, db_file: str, max_connections: int = DEFAULT_MAX_CONNECTIONS) -> None:
        self.db_file = db_file
        self.max_connections = max_connections
        self._pool: Optional[ConnectionPool] = None

    def initialize(self) -> None:
        """Open the database file, set up the pool and create the books table if needed."""
        pool = self._pool or ConnectionPool(self.db_file, self.max_connections)
        try:
            with pool.connection() as conn:
                conn.execute(CREATE_BOOKS_TABLE)
                conn.commit()
        except sqlite3.Error as e:
            pool.close()
            logger.error("Cannot prepare database %s: %s", self.db_file, e)
            raise DatabaseInitError(f"Cannot initialize database {self.db_file}: {e}") from e
        self._pool = pool
        logger.info("Database ready at %s (max %d connections)", self.db_file, self.max_connections)

    def handle(self) -> ConnectionPool:
        """Return the shared connection pool."""
        if self._pool is None:
            raise RuntimeError("Database.initialize() must be called before handle()")
        return self._pool

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
