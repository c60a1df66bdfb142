"""
Tests for the GitHub client and configuration.
"""

from unittest.mock import patch, MagicMock

import pytest
import requests

from gittempo import config
from gittempo.config import validate_config
from gittempo.github_client import GitHubClient, GitHubClientError


def mock_response(status_code=200, json_data=None, headers=None, text=""):
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.json.return_value = json_data
    response.headers = headers or {}
    response.text = text
    return response


class TestConfig:
    """Tests for configuration validation."""

    def test_defaults_are_valid(self):
        """Should accept the default configuration without a token."""
        with patch("gittempo.config.GITHUB_TOKEN", None):
            with patch("gittempo.config.MAX_COMMITS", "500"):
                with patch("gittempo.config.DEFAULT_HOURS", "48"):
                    validate_config()

    def test_validate_config_placeholder_token(self):
        """Should reject the placeholder value from .env.example."""
        with patch("gittempo.config.GITHUB_TOKEN", "your_token_here"):
            with pytest.raises(ValueError, match="GITHUB_TOKEN"):
                validate_config()

    def test_validate_config_bad_max_commits(self):
        with patch("gittempo.config.MAX_COMMITS", "lots"):
            with pytest.raises(ValueError, match="GITTEMPO_MAX_COMMITS"):
                validate_config()

    def test_validate_config_bad_default_hours(self):
        with patch("gittempo.config.DEFAULT_HOURS", "0"):
            with pytest.raises(ValueError, match="GITTEMPO_DEFAULT_HOURS"):
                validate_config()

    def test_validate_config_empty_dependency_files(self):
        with patch("gittempo.config.DEPENDENCY_FILES", " , "):
            with pytest.raises(ValueError, match="GITTEMPO_DEPENDENCY_FILES"):
                validate_config()

    def test_getters_fall_back_on_bad_values(self):
        with patch("gittempo.config.MAX_COMMITS", "-3"):
            assert config.get_max_commits() == 500
        with patch("gittempo.config.DEFAULT_HOURS", "x"):
            assert config.get_default_hours() == 48
        with patch("gittempo.config.CACHE_MINUTES", "-5"):
            assert config.get_cache_minutes() == 0

    def test_get_dependency_files_splits_list(self):
        with patch("gittempo.config.DEPENDENCY_FILES", " poetry.lock , requirements.txt,,"):
            assert config.get_dependency_files() == ["poetry.lock", "requirements.txt"]


class TestGitHubClient:
    """Tests for the GitHub API client."""

    def test_client_initialization(self):
        """Client should store the token and set up the session."""
        client = GitHubClient("test_token")

        assert client.token == "test_token"
        assert "Bearer test_token" in client.session.headers["Authorization"]

    def test_client_without_token(self):
        """Anonymous clients send no Authorization header."""
        client = GitHubClient()
        assert "Authorization" not in client.session.headers

    def test_client_headers(self):
        """Client should set correct API headers."""
        client = GitHubClient("test_token")

        assert client.session.headers["Accept"] == "application/vnd.github+json"
        assert "X-GitHub-Api-Version" in client.session.headers

    @patch("requests.Session.get")
    def test_list_commits_success(self, mock_get):
        """Should return the commit page on success."""
        mock_get.return_value = mock_response(json_data=[{"sha": "abc123"}])

        client = GitHubClient("test_token")
        commits = client.list_commits("owner/repo", page=2)

        assert commits == [{"sha": "abc123"}]
        call_args = mock_get.call_args
        assert call_args[0][0] == "https://api.github.com/repos/owner/repo/commits"
        assert call_args[1]["params"] == {"per_page": 100, "page": 2}

    @patch("requests.Session.get")
    def test_list_commits_caps_per_page_at_100(self, mock_get):
        """Should cap per_page at 100 (GitHub's max)."""
        mock_get.return_value = mock_response(json_data=[])

        GitHubClient().list_commits("owner/repo", per_page=250)

        assert mock_get.call_args[1]["params"]["per_page"] == 100

    @patch("requests.Session.get")
    def test_get_commit_success(self, mock_get):
        detail = {"sha": "abc123", "files": []}
        mock_get.return_value = mock_response(json_data=detail)

        client = GitHubClient("test_token")

        assert client.get_commit("owner/repo", "abc123") == detail
        assert mock_get.call_args[0][0] == "https://api.github.com/repos/owner/repo/commits/abc123"

    @patch("requests.Session.get")
    def test_auth_failure(self, mock_get):
        """Should raise error on 401 unauthorized."""
        mock_get.return_value = mock_response(401)

        with pytest.raises(GitHubClientError, match="Authentication failed"):
            GitHubClient("bad_token").list_commits("owner/repo")

    @patch("requests.Session.get")
    def test_repo_not_found(self, mock_get):
        """Should raise error on 404."""
        mock_get.return_value = mock_response(404)

        with pytest.raises(GitHubClientError, match="'owner/missing' not found"):
            GitHubClient().list_commits("owner/missing")

    @patch("requests.Session.get")
    def test_rate_limit(self, mock_get):
        """Should raise error on 403 rate limit."""
        mock_get.return_value = mock_response(403, headers={"X-RateLimit-Remaining": "0"})

        with pytest.raises(GitHubClientError, match="rate limit.*Remaining requests: 0"):
            GitHubClient().get_commit("owner/repo", "abc123")

    @patch("requests.Session.get")
    def test_empty_repository(self, mock_get):
        mock_get.return_value = mock_response(409)

        with pytest.raises(GitHubClientError, match="is empty"):
            GitHubClient().list_commits("owner/empty")

    @patch("requests.Session.get")
    def test_other_error(self, mock_get):
        mock_get.return_value = mock_response(500, text="Server Error")

        with pytest.raises(GitHubClientError, match="500 - Server Error"):
            GitHubClient().list_commits("owner/repo")

    @patch("requests.Session.get")
    def test_network_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(GitHubClientError, match="Could not reach GitHub"):
            GitHubClient().list_commits("owner/repo")
