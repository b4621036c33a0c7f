"""
SQLite database integration and simple migration system.

The ``Database`` class resolves the database file, opens connections
and applies migrations (``init_db``).  Connections are opened in
autocommit mode so that single statements commit on their own and
multi-statement units of work can take the write lock explicitly with
``BEGIN IMMEDIATE`` (see ``stores.sqlite_store``).

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS categories (
            category_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE
        );

        -- Events and tickets are maintained by the organiser dashboard;
        -- this service only reads them.
        CREATE TABLE IF NOT EXISTS events (
            event_id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            description TEXT,
            event_date TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            published_at TEXT,
            status TEXT DEFAULT 'draft',
            category_id INTEGER,
            FOREIGN KEY (category_id) REFERENCES categories(category_id)
        );

        CREATE TABLE IF NOT EXISTS tickets (
            ticket_id INTEGER PRIMARY KEY AUTOINCREMENT,
            event_id INTEGER NOT NULL,
            type TEXT NOT NULL,
            quantity INTEGER NOT NULL,
            price REAL NOT NULL,
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS bookings (
            booking_id INTEGER PRIMARY KEY AUTOINCREMENT,
            event_id INTEGER NOT NULL,
            attendee_name TEXT NOT NULL,
            attendee_email TEXT,
            ticket_type TEXT NOT NULL,
            quantity INTEGER NOT NULL,
            booking_date TEXT NOT NULL,
            dietary_notes TEXT,
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS waitlist (
            waitlist_id INTEGER PRIMARY KEY AUTOINCREMENT,
            event_id INTEGER NOT NULL,
            attendee_name TEXT NOT NULL,
            attendee_email TEXT NOT NULL,
            ticket_type TEXT NOT NULL,
            quantity INTEGER NOT NULL,
            requested_at TEXT NOT NULL,
            status TEXT DEFAULT 'waiting',
            notified_at TEXT,
            FOREIGN KEY (event_id) REFERENCES events(event_id) ON DELETE CASCADE
        );

        CREATE UNIQUE INDEX IF NOT EXISTS idx_tickets_event_type ON tickets(event_id, type);
        CREATE INDEX IF NOT EXISTS idx_events_status ON events(status);
        CREATE INDEX IF NOT EXISTS idx_events_date ON events(event_date);
        CREATE INDEX IF NOT EXISTS idx_bookings_event ON bookings(event_id);
        CREATE INDEX IF NOT EXISTS idx_waitlist_event ON waitlist(event_id);
        CREATE INDEX IF NOT EXISTS idx_waitlist_status ON waitlist(status);
        """,
    ),
    # Migration 2: group the per-tier rows of one booking request
    (
        2,
        """
        ALTER TABLE bookings ADD COLUMN reservation_id TEXT;
        CREATE INDEX IF NOT EXISTS idx_bookings_reservation ON bookings(reservation_id);
        """,
    ),
]


class Database:
    """Handle to the SQLite database file used by the service.

    One instance is created per application and shared by requests;
    each request opens its own connection through ``connection()``.
    """

    def __init__(self, database_url: Optional[str] = None, busy_timeout: Optional[float] = None) -> None:
        config: Settings = default_settings
        self.path = resolve_database_path(database_url or config.database_url)
        self.busy_timeout = busy_timeout if busy_timeout is not None else config.busy_timeout_seconds

    @classmethod
    def from_settings(cls, config: Settings) -> "Database":
        return cls(config.database_url, config.busy_timeout_seconds)

    def connect(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        ``isolation_level=None`` disables the implicit transactions of
        the ``sqlite3`` module; callers issue ``BEGIN IMMEDIATE`` when
        they need one.  ``check_same_thread`` is off because FastAPI may
        open a connection in its threadpool and use it on the event loop.
        """
        conn = sqlite3.connect(
            self.path,
            timeout=self.busy_timeout,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        # Foreign keys are off by default in SQLite and must be enabled
        # per connection.
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager that yields a connection and closes it on exit."""
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        """Create the database file if needed and apply pending migrations."""
        with self.connection() as conn:
            conn.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
            row = conn.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    logger.info("Applying database migration %s to %s", version, self.path)
                    conn.executescript(sql)
                    conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                    current_version = version


def resolve_database_path(database_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are used as is.  Relative paths are resolved against
    the project root (the directory containing ``workshop_booking_api``).
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())
