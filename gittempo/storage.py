"""
SQLite-based cache of change records.

Collecting a repository's commits costs one API call per commit, so the
records are kept locally for a few minutes between page loads.
"""

import logging
import os
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path

from gittempo.commit_parser import ChangeRecord, collect_change_records, parse_timestamp
from gittempo.github_client import GitHubClient

logger = logging.getLogger(__name__)


def _get_default_db_path() -> Path:
    """Get the default database path."""
    env_path = os.environ.get("GITTEMPO_DB_PATH")
    if env_path:
        return Path(env_path)
    return Path.home() / ".gittempo" / "commits.db"


class CommitStorage:
    """SQLite-based storage for fetched change records."""

    def __init__(self, db_path: str | Path | None = None):
        """
        Initialize the commit storage.

        Args:
            db_path: Path to the SQLite database file.
                     Defaults to ~/.gittempo/commits.db
        """
        if db_path is None:
            db_path = _get_default_db_path()
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self) -> None:
        """Create tables and indexes if they don't exist."""
        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS change_records (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    repo TEXT NOT NULL,
                    sha TEXT NOT NULL,
                    timestamp TEXT NOT NULL,
                    author TEXT NOT NULL,
                    additions INTEGER NOT NULL,
                    deletions INTEGER NOT NULL,
                    non_dependency_additions INTEGER NOT NULL,
                    non_dependency_deletions INTEGER NOT NULL,
                    is_dependency_change INTEGER NOT NULL,
                    UNIQUE(repo, sha)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_change_records_repo ON change_records(repo)
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS fetches (
                    repo TEXT PRIMARY KEY,
                    fetched_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def save_records(
        self, repo: str, records: list[ChangeRecord], fetched_at: datetime | None = None
    ) -> int:
        """
        Replace the stored records for a repository.

        Args:
            repo: Repository full name
            records: Freshly collected change records
            fetched_at: When the records were fetched. Defaults to now.

        Returns:
            Number of records stored
        """
        if fetched_at is None:
            fetched_at = datetime.now(timezone.utc)

        inserted = 0
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM change_records WHERE repo = ?", (repo,))
            for record in records:
                # Skip records with no SHA to key them by
                if not record.sha:
                    continue

                cursor = conn.execute(
                    """
                    INSERT OR IGNORE INTO change_records (
                        repo, sha, timestamp, author, additions, deletions,
                        non_dependency_additions, non_dependency_deletions,
                        is_dependency_change
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        repo,
                        record.sha,
                        record.timestamp.isoformat(),
                        record.author,
                        record.additions,
                        record.deletions,
                        record.non_dependency_additions,
                        record.non_dependency_deletions,
                        int(record.is_dependency_change),
                    ),
                )
                inserted += cursor.rowcount

            conn.execute(
                """
                INSERT INTO fetches (repo, fetched_at) VALUES (?, ?)
                ON CONFLICT(repo) DO UPDATE SET fetched_at = excluded.fetched_at
                """,
                (repo, fetched_at.isoformat()),
            )
            conn.commit()
        return inserted

    def get_records(self, repo: str) -> list[ChangeRecord]:
        """
        Retrieve stored records for a repository.

        Returns:
            Change records in the order they were collected (newest first)
        """
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                """
                SELECT sha, timestamp, author, additions, deletions,
                       non_dependency_additions, non_dependency_deletions,
                       is_dependency_change
                FROM change_records
                WHERE repo = ?
                ORDER BY id
                """,
                (repo,),
            ).fetchall()

        return [
            ChangeRecord(
                timestamp=parse_timestamp(row["timestamp"]),
                author=row["author"],
                additions=row["additions"],
                deletions=row["deletions"],
                non_dependency_additions=row["non_dependency_additions"],
                non_dependency_deletions=row["non_dependency_deletions"],
                is_dependency_change=bool(row["is_dependency_change"]),
                sha=row["sha"],
            )
            for row in rows
        ]

    def get_fetched_at(self, repo: str) -> datetime | None:
        """When the repository was last fetched, or None if never."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT fetched_at FROM fetches WHERE repo = ?",
                (repo,),
            ).fetchone()
        return parse_timestamp(row[0]) if row else None

    def is_fresh(self, repo: str, max_age_minutes: int, now: datetime | None = None) -> bool:
        """Whether the stored records are younger than max_age_minutes."""
        fetched_at = self.get_fetched_at(repo)
        if fetched_at is None or max_age_minutes <= 0:
            return False
        if now is None:
            now = datetime.now(timezone.utc)
        return now - fetched_at < timedelta(minutes=max_age_minutes)

    def clear(self) -> None:
        """Delete all stored records. Primarily for testing."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM change_records")
            conn.execute("DELETE FROM fetches")
            conn.commit()


def get_change_records(
    client: GitHubClient,
    repo: str,
    storage: CommitStorage | None = None,
    max_commits: int = 500,
    dependency_files: list[str] | None = None,
    cache_minutes: int = 10,
) -> list[ChangeRecord]:
    """
    Return change records for a repository, fetching only when the cache is stale.

    Args:
        client: GitHub client used on a cache miss
        repo: Repository full name
        storage: Record cache. Creates default if not provided.
        max_commits: Cap on commits collected per fetch
        dependency_files: Filename fragments identifying dependency files
        cache_minutes: Maximum age of cached records

    Returns:
        Change records, newest first
    """
    if storage is None:
        storage = CommitStorage()

    if storage.is_fresh(repo, cache_minutes):
        logger.debug("Using cached commits for %s", repo)
        return storage.get_records(repo)

    records = collect_change_records(client, repo, max_commits, dependency_files)
    storage.save_records(repo, records)
    return records
