"""
Configuration management for gittempo.

Loads GitHub credentials and tuning knobs from environment variables.
"""

import os
from dotenv import load_dotenv

# Load .env file from project root
load_dotenv()

GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
MAX_COMMITS = os.getenv("GITTEMPO_MAX_COMMITS", "500")
DEFAULT_HOURS = os.getenv("GITTEMPO_DEFAULT_HOURS", "48")
CACHE_MINUTES = os.getenv("GITTEMPO_CACHE_MINUTES", "10")
DEPENDENCY_FILES = os.getenv(
    "GITTEMPO_DEPENDENCY_FILES", "package.json,package-lock.json,yarn.lock"
)

# Range buttons offered on the graph page (7d = 168h)
TIME_RANGE_CHOICES = [12, 24, 48, 168]


def _as_positive_int(value: str | None) -> int | None:
    """Parse a positive integer, returning None when invalid."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def get_max_commits() -> int:
    """Maximum number of commits to collect per repository."""
    return _as_positive_int(MAX_COMMITS) or 500


def get_default_hours() -> int:
    """Default look-back window in hours."""
    return _as_positive_int(DEFAULT_HOURS) or 48


def get_cache_minutes() -> int:
    """How long fetched commits stay fresh in the local cache."""
    try:
        minutes = int(CACHE_MINUTES)
    except (TypeError, ValueError):
        return 10
    return max(minutes, 0)


def get_dependency_files() -> list[str]:
    """Filename fragments that mark a file as a dependency manifest."""
    return [name.strip() for name in DEPENDENCY_FILES.split(",") if name.strip()]


def validate_config():
    """Validate that configuration values are usable."""
    problems = []

    if GITHUB_TOKEN == "your_token_here":
        problems.append("GITHUB_TOKEN (placeholder value)")

    if _as_positive_int(MAX_COMMITS) is None:
        problems.append("GITTEMPO_MAX_COMMITS (must be a positive integer)")

    if _as_positive_int(DEFAULT_HOURS) is None:
        problems.append("GITTEMPO_DEFAULT_HOURS (must be a positive integer)")

    if not DEPENDENCY_FILES or not DEPENDENCY_FILES.strip(" ,"):
        problems.append("GITTEMPO_DEPENDENCY_FILES (must list at least one file)")

    if problems:
        raise ValueError(
            f"Invalid configuration: {', '.join(problems)}\n"
            "Please copy .env.example to .env and fill in your values.\n"
            "A GITHUB_TOKEN is optional but raises the API rate limit."
        )
