"""
Parse commits from GitHub API responses into change records.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from gittempo.github_client import GitHubClient, GitHubClientError

logger = logging.getLogger(__name__)

DEFAULT_DEPENDENCY_FILES = ["package.json", "package-lock.json", "yarn.lock"]

_REPO_URL_RE = re.compile(r"^https://github\.com/([^/\s]+)/([^/\s]+?)/?$")
_REPO_NAME_RE = re.compile(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)$")


@dataclass(frozen=True)
class ChangeRecord:
    """Additions and deletions introduced by a single commit."""

    timestamp: datetime
    author: str
    additions: int
    deletions: int
    non_dependency_additions: int
    non_dependency_deletions: int
    is_dependency_change: bool
    sha: str = ""

    def to_dict(self) -> dict:
        """Serialize to the JSON shape served by /api/commits."""
        return {
            "sha": self.sha,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
            "author": self.author,
            "additions": self.additions,
            "deletions": self.deletions,
            "nonDependencyAdditions": self.non_dependency_additions,
            "nonDependencyDeletions": self.non_dependency_deletions,
            "isDependencyChange": self.is_dependency_change,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChangeRecord":
        """Build a record from the dict produced by to_dict()."""
        additions = data.get("additions", 0)
        deletions = data.get("deletions", 0)
        return cls(
            timestamp=parse_timestamp(data["timestamp"]),
            author=data.get("author", "unknown"),
            additions=additions,
            deletions=deletions,
            non_dependency_additions=data.get("nonDependencyAdditions", additions),
            non_dependency_deletions=data.get("nonDependencyDeletions", deletions),
            is_dependency_change=data.get("isDependencyChange", False),
            sha=data.get("sha", ""),
        )


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp as returned by GitHub ("2025-01-05T15:04:05Z").

    Naive values are assumed to be UTC.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_repo_url(url: str) -> str:
    """
    Extract "owner/repo" from a GitHub repository URL.

    Accepts "https://github.com/owner/repo" (with or without a trailing
    slash) or a bare "owner/repo".

    Raises:
        ValueError: If the input is not a GitHub repository reference
    """
    url = url.strip()
    match = _REPO_URL_RE.match(url) or _REPO_NAME_RE.match(url)
    if not match:
        raise ValueError("Please enter a valid GitHub repository URL.")
    return f"{match.group(1)}/{match.group(2)}"


def is_dependency_file(filename: str, dependency_files: list[str] | None = None) -> bool:
    """Whether a changed file is a dependency manifest or lockfile."""
    if dependency_files is None:
        dependency_files = DEFAULT_DEPENDENCY_FILES
    return any(name in filename for name in dependency_files)


def parse_commit_detail(
    detail: dict, dependency_files: list[str] | None = None
) -> ChangeRecord:
    """
    Convert a GitHub commit detail response into a ChangeRecord.

    Per-file additions/deletions are summed. Files matching a dependency
    manifest flag the commit and are left out of the non-dependency totals.

    Args:
        detail: Commit dictionary from GET /repos/{repo}/commits/{sha}
        dependency_files: Filename fragments identifying dependency files

    Returns:
        ChangeRecord for the commit
    """
    commit_author = detail.get("commit", {}).get("author") or {}

    total_additions = 0
    total_deletions = 0
    non_dependency_additions = 0
    non_dependency_deletions = 0
    has_dependency_changes = False

    for file in detail.get("files") or []:
        additions = file.get("additions") or 0
        deletions = file.get("deletions") or 0
        total_additions += additions
        total_deletions += deletions

        if is_dependency_file(file.get("filename", ""), dependency_files):
            has_dependency_changes = True
        else:
            non_dependency_additions += additions
            non_dependency_deletions += deletions

    return ChangeRecord(
        timestamp=parse_timestamp(commit_author.get("date", "")),
        author=commit_author.get("name") or "unknown",
        additions=total_additions,
        deletions=total_deletions,
        non_dependency_additions=non_dependency_additions,
        non_dependency_deletions=non_dependency_deletions,
        is_dependency_change=has_dependency_changes,
        sha=detail.get("sha", ""),
    )


def collect_change_records(
    client: GitHubClient,
    repo: str,
    max_commits: int = 500,
    dependency_files: list[str] | None = None,
    per_page: int = 100,
) -> list[ChangeRecord]:
    """
    Page through a repository's commits and build a record for each one.

    Stops after max_commits records or at the first empty page. Commits
    whose detail cannot be fetched are skipped.

    Raises:
        GitHubClientError: If a page of the commit list cannot be fetched
    """
    records: list[ChangeRecord] = []
    page = 1

    while len(records) < max_commits:
        commit_list = client.list_commits(repo, page=page, per_page=per_page)
        if not commit_list:
            break

        for commit in commit_list:
            if len(records) >= max_commits:
                break

            sha = commit.get("sha", "")
            try:
                detail = client.get_commit(repo, sha)
            except GitHubClientError as e:
                logger.warning("Skipping commit %s in %s: %s", sha[:7], repo, e)
                continue

            records.append(parse_commit_detail(detail, dependency_files))

        page += 1

    logger.info("Collected %d commits from %s", len(records), repo)
    return records
