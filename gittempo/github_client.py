"""
GitHub API client for fetching repository commits.
"""

import logging

import requests

logger = logging.getLogger(__name__)


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubClient:
    """Client for interacting with the GitHub REST API."""

    BASE_URL = "https://api.github.com"
    TIMEOUT = 30

    def __init__(self, token: str | None = None):
        """
        Initialize the GitHub client.

        Args:
            token: GitHub personal access token. Optional; anonymous
                requests work against public repos with a lower rate limit.
        """
        self.token = token
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _get(self, url: str, params: dict | None = None) -> requests.Response:
        try:
            return self.session.get(url, params=params, timeout=self.TIMEOUT)
        except requests.RequestException as e:
            raise GitHubClientError(f"Could not reach GitHub: {e}") from e

    def _check_response(self, response: requests.Response, repo: str) -> None:
        """Translate an unsuccessful response into a GitHubClientError."""
        if response.status_code == 401:
            raise GitHubClientError(
                "Authentication failed. Check your GITHUB_TOKEN is valid."
            )
        elif response.status_code == 404:
            raise GitHubClientError(f"Repository '{repo}' not found on GitHub.")
        elif response.status_code == 403:
            # Check for rate limiting
            remaining = response.headers.get("X-RateLimit-Remaining", "unknown")
            raise GitHubClientError(
                f"API rate limit exceeded or access forbidden. "
                f"Remaining requests: {remaining}"
            )
        elif response.status_code == 409:
            raise GitHubClientError(f"Repository '{repo}' is empty.")
        elif not response.ok:
            raise GitHubClientError(
                f"GitHub API error: {response.status_code} - {response.text}"
            )

    def list_commits(self, repo: str, page: int = 1, per_page: int = 100) -> list[dict]:
        """
        Fetch one page of commits for a repository, newest first.

        Args:
            repo: Repository full name ("owner/name")
            page: 1-based page number
            per_page: Number of commits per page (max 100)

        Returns:
            List of commit summary dictionaries from the GitHub API

        Raises:
            GitHubClientError: If the API request fails
        """
        url = f"{self.BASE_URL}/repos/{repo}/commits"
        params = {"per_page": min(per_page, 100), "page": page}

        response = self._get(url, params=params)
        self._check_response(response, repo)

        return response.json()

    def get_commit(self, repo: str, sha: str) -> dict:
        """
        Fetch a single commit including its per-file stats.

        Args:
            repo: Repository full name ("owner/name")
            sha: Commit SHA

        Returns:
            Commit detail dictionary with "commit", "stats" and "files"

        Raises:
            GitHubClientError: If the API request fails
        """
        url = f"{self.BASE_URL}/repos/{repo}/commits/{sha}"

        response = self._get(url)
        self._check_response(response, repo)

        logger.debug("Fetched commit %s from %s", sha[:7], repo)
        return response.json()
