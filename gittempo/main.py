"""
gittempo: commit activity for GitHub repositories

Console entry point. Prints totals and a text bar for each active bucket.
"""

import argparse

from gittempo.activity_binner import BinnedSeries, TimeWindow, bin_records
from gittempo.chart import calculate_totals
from gittempo.commit_filters import filter_records, make_zoom_key
from gittempo.commit_parser import parse_repo_url
from gittempo.config import (
    GITHUB_TOKEN,
    get_cache_minutes,
    get_default_hours,
    get_dependency_files,
    get_max_commits,
    validate_config,
)
from gittempo.github_client import GitHubClient, GitHubClientError
from gittempo.logging_config import setup_logging
from gittempo.storage import CommitStorage, get_change_records
from gittempo.zoom_planner import compute_zoom_window

BAR_WIDTH = 40


def format_bucket_row(label: str, additions: int, deletions: int, scale: int) -> str:
    """Format one bucket as a line of + and - characters."""
    plus = "+" * max(1, round(additions / scale * BAR_WIDTH)) if additions else ""
    minus = "-" * max(1, round(abs(deletions) / scale * BAR_WIDTH)) if deletions else ""
    return f"  {label:<22} {additions:>6} {abs(deletions):>6}  {plus}{minus}"


def _display_series(series: BinnedSeries, start: int, end: int) -> None:
    """Print the buckets between start and end (inclusive)."""
    scale = max(
        [a + abs(d) for a, d in zip(series.additions, series.deletions)] or [0]
    ) or 1

    print(f"  {'BUCKET':<22} {'ADDS':>6} {'DELS':>6}")
    print("  " + "-" * 80)
    for i in range(start, end + 1):
        print(format_bucket_row(series.labels[i], series.additions[i], series.deletions[i], scale))
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gittempo",
        description="Show recent commit activity for a GitHub repository.",
    )
    parser.add_argument("repo", help="GitHub repo URL or owner/name")
    parser.add_argument("--hours", type=int, default=None, help="Look-back window in hours")
    parser.add_argument("--author", action="append", dest="authors", help="Only count this author (repeatable)")
    parser.add_argument("--hide-dependencies", action="store_true", help="Ignore dependency file changes")
    parser.add_argument("--exclude-initial", action="store_true", help="Leave out the first commit")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    print("gittempo - Were you rushing or were you dragging?")
    print("-" * 50)

    # Validate configuration
    try:
        validate_config()
        repo = parse_repo_url(args.repo)
    except ValueError as e:
        print(f"\nConfiguration Error:\n{e}")
        return 1

    hours = args.hours or get_default_hours()
    client = GitHubClient(GITHUB_TOKEN)

    try:
        print(f"\nFetching commits for {repo}...\n")
        records = get_change_records(
            client,
            repo,
            CommitStorage(),
            max_commits=get_max_commits(),
            dependency_files=get_dependency_files(),
            cache_minutes=get_cache_minutes(),
        )
    except GitHubClientError as e:
        print(f"\nError: {e}")
        return 1

    if not records:
        print("No commits found.")
        return 0

    include_initial = not args.exclude_initial
    filtered = filter_records(records, authors=args.authors, include_initial=include_initial)
    window = TimeWindow.from_hours_back(hours)
    series = bin_records(filtered, window, args.hide_dependencies)
    totals = calculate_totals(series)

    print(f"Last {hours} hours ({series.bucket_hours}h buckets):")
    print(f"   Total additions: {totals['additions']}")
    print(f"   Total deletions: {totals['deletions']}")
    print()

    zoom_key = make_zoom_key(hours, args.authors, args.hide_dependencies, include_initial)
    zoom_window, _ = compute_zoom_window(series, window.total_hours, zoom_key)
    if zoom_window.min_index is None:
        print(f"No commits in the last {hours} hours.")
        return 0

    _display_series(series, zoom_window.min_index, zoom_window.max_index)
    return 0


if __name__ == "__main__":
    exit(main())
