"""
Tests for the console entry point.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from gittempo.commit_parser import ChangeRecord
from gittempo.github_client import GitHubClientError
from gittempo.main import build_parser, format_bucket_row, main


def recent_record(hours_ago, additions=30, deletions=10, author="alice"):
    return ChangeRecord(
        timestamp=datetime.now(timezone.utc) - timedelta(hours=hours_ago),
        author=author,
        additions=additions,
        deletions=deletions,
        non_dependency_additions=additions,
        non_dependency_deletions=deletions,
        is_dependency_change=False,
        sha=f"sha{hours_ago}",
    )


class TestFormatBucketRow:
    """Tests for text bars."""

    def test_bar_scaled_to_largest_bucket(self):
        row = format_bucket_row("Jan 5, 3PM", 30, -10, 40)

        assert "Jan 5, 3PM" in row
        assert row.endswith("+" * 30 + "-" * 10)

    def test_empty_bucket_has_no_bar(self):
        row = format_bucket_row("Jan 5, 4PM", 0, 0, 40)
        assert row.rstrip().endswith("0")

    def test_tiny_change_still_visible(self):
        row = format_bucket_row("Jan 5, 5PM", 1, 0, 1000)
        assert row.endswith("+")


class TestBuildParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["owner/repo"])

        assert args.repo == "owner/repo"
        assert args.hours is None
        assert args.authors is None
        assert args.hide_dependencies is False
        assert args.exclude_initial is False

    def test_repeatable_author(self):
        args = build_parser().parse_args(["owner/repo", "--author", "a", "--author", "b", "--hours", "12"])

        assert args.authors == ["a", "b"]
        assert args.hours == 12


@patch("gittempo.main.setup_logging")
@patch("gittempo.main.CommitStorage")
class TestMain:
    """Tests for main()."""

    @patch("gittempo.main.get_change_records")
    def test_prints_totals_and_buckets(self, mock_get, mock_storage, mock_logging, capsys):
        mock_get.return_value = [recent_record(2), recent_record(3, additions=5, deletions=0)]

        assert main(["owner/repo", "--hours", "12"]) == 0

        out = capsys.readouterr().out
        assert "Total additions: 35" in out
        assert "Total deletions: 10" in out
        assert "BUCKET" in out

    @patch("gittempo.main.get_change_records")
    def test_no_recent_activity(self, mock_get, mock_storage, mock_logging, capsys):
        mock_get.return_value = [recent_record(500)]

        assert main(["owner/repo", "--hours", "12"]) == 0
        assert "No commits in the last 12 hours." in capsys.readouterr().out

    @patch("gittempo.main.get_change_records")
    def test_no_commits(self, mock_get, mock_storage, mock_logging, capsys):
        mock_get.return_value = []

        assert main(["owner/repo"]) == 0
        assert "No commits found." in capsys.readouterr().out

    @patch("gittempo.main.get_change_records")
    def test_github_error(self, mock_get, mock_storage, mock_logging, capsys):
        mock_get.side_effect = GitHubClientError("Repository 'owner/repo' not found on GitHub.")

        assert main(["owner/repo"]) == 1
        assert "not found" in capsys.readouterr().out

    def test_invalid_repo(self, mock_storage, mock_logging, capsys):
        assert main(["not a repo"]) == 1
        assert "valid GitHub repository URL" in capsys.readouterr().out
