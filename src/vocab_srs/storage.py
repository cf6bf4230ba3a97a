"""Key/value storage backends for the deck, history and settings.

A backend only moves text: ``read(key)`` returns the stored string or None,
``write(key, text)`` replaces it. Parsing and corrupt-state handling belong to
the callers.
"""
import json
import logging
import os
import sqlite3
import tempfile
from pathlib import Path

from vocab_srs.config import DEFAULT_DB_PATH
from vocab_srs.errors import StorageError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class MemoryStorage:
    """In-process storage, used for tests and throwaway decks."""

    def __init__(self, initial: dict | None = None):
        self._data = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, text: str) -> None:
        self._data[key] = text


class JsonFileStorage:
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return self.directory / f"{safe}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

    def write(self, key: str, text: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the key/value table if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


class SqliteStorage:
    """Key/value rows in a local SQLite database."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        init_db(db_path)

    def read(self, key: str) -> str | None:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            logger.warning("Could not read %r from %s: %s", key, self.db_path, e)
            return None
        finally:
            conn.close()
        return row["value"] if row else None

    def write(self, key: str, text: str) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                """INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=CURRENT_TIMESTAMP""",
                (key, text),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Could not write {key!r} to {self.db_path}: {e}") from e
        finally:
            conn.close()


def read_json(storage, key: str, default):
    """Decode the JSON value stored under ``key``, or ``default`` if absent or unparseable."""
    raw = storage.read(key)
    if raw is None or raw == "":
        return default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Stored value under %r is not valid JSON, using default: %s", key, e)
        return default


def write_json(storage, key: str, value) -> None:
    try:
        text = json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Value for {key!r} is not JSON-serializable: {e}") from e
    storage.write(key, text)
