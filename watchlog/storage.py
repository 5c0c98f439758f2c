"""
SQLite watchlist storage

Every public method opens and closes its own connection so callers never
have to manage connection life-cycle.
"""

import logging
import sqlite3
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .exceptions import StorageError
from .models import Notification, TrackedSeason

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS anime (
    id               TEXT    PRIMARY KEY,
    user_id          TEXT    NOT NULL,
    title            TEXT    NOT NULL,
    season_number    INTEGER NOT NULL DEFAULT 1,
    mal_id           INTEGER,
    episodes_watched INTEGER NOT NULL DEFAULT 0,
    total_episodes   INTEGER,
    status           TEXT    NOT NULL DEFAULT 'watching',
    rating           INTEGER,
    notes            TEXT,
    cover_image      TEXT,
    created_at       TEXT    NOT NULL DEFAULT (datetime('now')),
    updated_at       TEXT    NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS notifications (
    id                TEXT    PRIMARY KEY,
    user_id           TEXT    NOT NULL,
    anime_id          TEXT    REFERENCES anime(id) ON DELETE CASCADE,
    anime_title       TEXT    NOT NULL,
    season_number     INTEGER,
    episode_number    INTEGER,
    notification_type TEXT    NOT NULL,
    message           TEXT    NOT NULL,
    read              INTEGER NOT NULL DEFAULT 0,
    created_at        TEXT    NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_anime_user_id        ON anime(user_id);
CREATE INDEX IF NOT EXISTS idx_anime_mal_id         ON anime(mal_id);
CREATE INDEX IF NOT EXISTS idx_notifications_user   ON notifications(user_id);
CREATE INDEX IF NOT EXISTS idx_notifications_read   ON notifications(user_id, read);
"""

# Columns callers may set on a tracked season
ENTRY_FIELDS = (
    "title",
    "season_number",
    "mal_id",
    "episodes_watched",
    "total_episodes",
    "status",
    "rating",
    "notes",
    "cover_image",
)


def _row_to_season(row: sqlite3.Row) -> TrackedSeason:
    return TrackedSeason(**{key: row[key] for key in row.keys()})


def _row_to_notification(row: sqlite3.Row) -> Notification:
    data = {key: row[key] for key in row.keys()}
    data["read"] = bool(data["read"])
    return Notification(**data)


def _check_entry_fields(rows: List[Dict[str, Any]]):
    for row in rows:
        unknown = set(row) - set(ENTRY_FIELDS) - {"user_id"}
        if unknown:
            raise StorageError(f"Unknown fields: {', '.join(sorted(unknown))}")


def _insert_entry(conn: sqlite3.Connection, row: Dict[str, Any]) -> str:
    entry_id = str(uuid.uuid4())
    columns = ["id", *row.keys()]
    placeholders = ", ".join("?" for _ in columns)
    conn.execute(
        f"INSERT INTO anime ({', '.join(columns)}) VALUES ({placeholders})",
        (entry_id, *row.values()),
    )
    return entry_id


def _insert_notification(
    conn: sqlite3.Connection,
    user_id: str,
    anime_title: str,
    notification_type: str,
    message: str,
    anime_id: str | None = None,
    season_number: int | None = None,
    episode_number: int | None = None,
) -> str:
    notification_id = str(uuid.uuid4())
    conn.execute(
        """
        INSERT INTO notifications (
            id, user_id, anime_id, anime_title, season_number,
            episode_number, notification_type, message
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            notification_id,
            user_id,
            anime_id,
            anime_title,
            season_number,
            episode_number,
            notification_type,
            message,
        ),
    )
    return notification_id


class WatchlistStore:
    """Stores tracked seasons and release notifications"""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
            return conn
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database {self.db_path}: {e}") from e

    def init_db(self):
        """Create all tables if they do not exist yet"""
        if self.db_path.parent and not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = self._connect()
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(_SCHEMA_SQL)
            conn.commit()
            logger.debug(f"Database initialised at {self.db_path}")
        except sqlite3.Error as e:
            raise StorageError(f"Schema init failed: {e}") from e
        finally:
            conn.close()

    # Tracked seasons

    def create_entries(self, rows: Iterable[Dict[str, Any]]) -> List[TrackedSeason]:
        """Insert tracked seasons in a single transaction"""
        rows = list(rows)
        if not rows:
            return []
        _check_entry_fields(rows)

        conn = self._connect()
        try:
            ids = [_insert_entry(conn, row) for row in rows]
            conn.commit()

            created = [
                _row_to_season(
                    conn.execute("SELECT * FROM anime WHERE id = ?", (i,)).fetchone()
                )
                for i in ids
            ]
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Failed to create entries: {e}") from e
        finally:
            conn.close()

        logger.info(f"Created {len(created)} tracked season(s)")
        return created

    def save_update_results(
        self,
        user_id: str,
        notifications: Iterable[Dict[str, Any]],
        episode_counts: Dict[str, int],
        new_rows: Iterable[Dict[str, Any]],
    ):
        """
        Persist the outcome of an update check in a single transaction

        Notifications, new episode counts and new season rows are written
        together; if anything fails nothing is kept, so the next check finds
        the same releases again.

        Args:
            user_id: Owner of the notifications
            notifications: Notification payloads (create_notification kwargs)
            episode_counts: New total_episodes per tracked season id
            new_rows: Tracked season rows to insert
        """
        notifications = list(notifications)
        new_rows = list(new_rows)
        _check_entry_fields(new_rows)

        conn = self._connect()
        try:
            for payload in notifications:
                _insert_notification(conn, user_id, **payload)
            for entry_id, total in episode_counts.items():
                conn.execute(
                    "UPDATE anime SET total_episodes = ?, updated_at = datetime('now') "
                    "WHERE id = ?",
                    (total, entry_id),
                )
            for row in new_rows:
                _insert_entry(conn, row)
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Failed to save update results: {e}") from e
        finally:
            conn.close()

        logger.info(
            f"Saved {len(notifications)} notification(s), "
            f"{len(episode_counts)} episode count(s), {len(new_rows)} new season(s)"
        )

    def get_entry(self, entry_id: str) -> TrackedSeason | None:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM anime WHERE id = ?", (entry_id,)).fetchone()
            return _row_to_season(row) if row else None
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read entry {entry_id}: {e}") from e
        finally:
            conn.close()

    def update_entry(self, entry_id: str, **fields) -> TrackedSeason | None:
        """
        Update some fields of a tracked season

        Returns:
            The updated row, or None if no row has this id
        """
        if not fields:
            return self.get_entry(entry_id)

        unknown = set(fields) - set(ENTRY_FIELDS)
        if unknown:
            raise StorageError(f"Unknown fields: {', '.join(sorted(unknown))}")

        assignments = ", ".join(f"{name} = ?" for name in fields)
        conn = self._connect()
        try:
            cur = conn.execute(
                f"UPDATE anime SET {assignments}, updated_at = datetime('now') "
                "WHERE id = ?",
                (*fields.values(), entry_id),
            )
            conn.commit()
            if cur.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM anime WHERE id = ?", (entry_id,)).fetchone()
            return _row_to_season(row)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to update entry {entry_id}: {e}") from e
        finally:
            conn.close()

    def delete_entry(self, entry_id: str) -> bool:
        """Delete a tracked season and its notifications, True if a row was removed"""
        conn = self._connect()
        try:
            cur = conn.execute("DELETE FROM anime WHERE id = ?", (entry_id,))
            conn.commit()
            return cur.rowcount > 0
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete entry {entry_id}: {e}") from e
        finally:
            conn.close()

    def list_entries(self, user_id: str) -> List[TrackedSeason]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM anime WHERE user_id = ? "
                "ORDER BY title COLLATE NOCASE, season_number, created_at",
                (user_id,),
            ).fetchall()
            return [_row_to_season(r) for r in rows]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list entries: {e}") from e
        finally:
            conn.close()

    def list_entries_by_show_title(self, user_id: str) -> Dict[str, List[TrackedSeason]]:
        """Group a user's tracked seasons by show title"""
        grouped: Dict[str, List[TrackedSeason]] = OrderedDict()
        for entry in self.list_entries(user_id):
            grouped.setdefault(entry.title, []).append(entry)
        return grouped

    # Notifications

    def create_notification(
        self,
        user_id: str,
        anime_title: str,
        notification_type: str,
        message: str,
        anime_id: str | None = None,
        season_number: int | None = None,
        episode_number: int | None = None,
    ) -> Notification:
        conn = self._connect()
        try:
            notification_id = _insert_notification(
                conn,
                user_id,
                anime_title,
                notification_type,
                message,
                anime_id=anime_id,
                season_number=season_number,
                episode_number=episode_number,
            )
            conn.commit()
            row = conn.execute(
                "SELECT * FROM notifications WHERE id = ?", (notification_id,)
            ).fetchone()
            return _row_to_notification(row)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create notification: {e}") from e
        finally:
            conn.close()

    def list_notifications(
        self, user_id: str, unread_only: bool = False
    ) -> List[Notification]:
        query = "SELECT * FROM notifications WHERE user_id = ?"
        if unread_only:
            query += " AND read = 0"
        query += " ORDER BY created_at DESC, rowid DESC"

        conn = self._connect()
        try:
            rows = conn.execute(query, (user_id,)).fetchall()
            return [_row_to_notification(r) for r in rows]
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list notifications: {e}") from e
        finally:
            conn.close()

    def mark_notification_read(self, notification_id: str) -> bool:
        return self._execute(
            "UPDATE notifications SET read = 1 WHERE id = ?", (notification_id,)
        )

    def mark_all_notifications_read(self, user_id: str):
        self._execute("UPDATE notifications SET read = 1 WHERE user_id = ?", (user_id,))

    def _execute(self, sql: str, params: tuple) -> bool:
        conn = self._connect()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.rowcount > 0
        except sqlite3.Error as e:
            raise StorageError(f"Database write failed: {e}") from e
        finally:
            conn.close()
