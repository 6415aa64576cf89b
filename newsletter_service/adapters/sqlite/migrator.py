"""
Schema migrations for the SQLite store.

Each `migrations/*.sql` file is applied once, in filename order. Only the
part above `-- Down` runs. A file and its `_migrations` row are applied in
a single transaction, so a failing file leaves no partial schema behind.
"""

import logging
import os
import sqlite3

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


class MigrationError(RuntimeError):
    """A migration file could not be applied."""

    def __init__(self, filename: str, error: str) -> None:
        self.filename = filename
        super().__init__(f"Migration {filename} failed: {error}")


class SQLiteMigrator:
    def __init__(self, db_path: str, migrations_dir: str):
        self.db_path = db_path
        self.migrations_dir = migrations_dir

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _ensure_migration_table(self, conn: sqlite3.Connection) -> None:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                filename TEXT UNIQUE NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)
        conn.commit()

    def _get_applied_migrations(self, conn: sqlite3.Connection) -> set[str]:
        return {row[0] for row in conn.execute("SELECT filename FROM _migrations")}

    def pending_migrations(self, applied: set[str]) -> list[str]:
        files = sorted(f for f in os.listdir(self.migrations_dir) if f.endswith(".sql"))
        return [f for f in files if f not in applied]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        conn = self._get_connection()
        applied_now: list[str] = []
        try:
            self._ensure_migration_table(conn)
            for filename in self.pending_migrations(self._get_applied_migrations(conn)):
                logger.info("Applying migration: %s", filename)
                self._apply_migration(conn, filename)
                applied_now.append(filename)

            logger.info("All migrations applied (%d new).", len(applied_now))
            return applied_now
        finally:
            conn.close()

    def _read_up_script(self, filename: str) -> str:
        with open(os.path.join(self.migrations_dir, filename)) as f:
            content = f.read()
        return content.split(DOWN_MARKER)[0]

    def _apply_migration(self, conn: sqlite3.Connection, filename: str) -> None:
        script = self._read_up_script(filename)
        try:
            # executescript commits any open transaction first; BEGIN keeps the file atomic.
            conn.executescript(f"BEGIN;\n{script}\n;")
            conn.execute("INSERT INTO _migrations (filename) VALUES (?)", (filename,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Migration %s failed, rolled back", filename)
            raise MigrationError(filename, str(e)) from e
