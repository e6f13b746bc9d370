"""
Archived YouTube video IDs.

Videos the team has hidden from the attribution grid. The store is an
explicit object handed to the views (see web/routes/api/_deps.py):

    ids = store.load()
    ids = store.toggle("dQw4w9WgXcQ")   # new set, nothing written yet
    store.persist(ids)
"""
import logging
import sqlite3
from pathlib import Path
from typing import FrozenSet, Iterable, Union

logger = logging.getLogger(__name__)


class ArchiveStore:
    """SQLite-backed set of archived video IDs."""

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("""
            CREATE TABLE IF NOT EXISTS archived_videos (
                video_id TEXT PRIMARY KEY,
                archived_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        return conn

    def load(self) -> FrozenSet[str]:
        """Currently archived IDs."""
        conn = self._connect()
        try:
            rows = conn.execute("SELECT video_id FROM archived_videos").fetchall()
        finally:
            conn.close()
        return frozenset(row[0] for row in rows)

    def toggle(self, video_id: str) -> FrozenSet[str]:
        """The archived set with video_id flipped; does not write."""
        current = self.load()
        if video_id in current:
            return current - {video_id}
        return current | {video_id}

    def persist(self, video_ids: Iterable[str]) -> None:
        """Replace the stored set with video_ids."""
        ids = sorted(set(video_ids))
        conn = self._connect()
        try:
            with conn:
                if ids:
                    placeholders = ",".join("?" * len(ids))
                    conn.execute(
                        f"DELETE FROM archived_videos WHERE video_id NOT IN ({placeholders})",
                        ids,
                    )
                else:
                    conn.execute("DELETE FROM archived_videos")
                conn.executemany(
                    "INSERT OR IGNORE INTO archived_videos (video_id) VALUES (?)",
                    [(video_id,) for video_id in ids],
                )
        finally:
            conn.close()
        logger.info(f"Archived videos updated: {len(ids)} archived")
