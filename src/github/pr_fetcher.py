"""Fetch merged Pull Requests from the GitHub REST API"""

from typing import Optional

import requests

from src.config import (
    GITHUB_API_URL,
    GITHUB_ACCEPT_HEADER,
    NAME_PATTERN,
    REQUEST_TIMEOUT_SECONDS,
    USER_AGENT,
    Repository,
)
from src.errors import PRFetchError


class GitHubRestClient:
    """Simple GitHub REST client"""

    def __init__(self, token: Optional[str] = None, timeout: float = REQUEST_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None, base_url: str = GITHUB_API_URL):
        """
        Args:
            token: GitHub token; requests are sent unauthenticated when empty
            timeout: Per-request timeout in seconds
            session: Optional requests session to reuse
            base_url: API root URL
        """
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.headers = {
            "Accept": GITHUB_ACCEPT_HEADER,
            "User-Agent": USER_AGENT,
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def get_json(self, path: str, params: dict = None):
        """Execute a GET request and return the decoded JSON body"""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, headers=self.headers, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise PRFetchError(f"request to {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise PRFetchError(f"GitHub API request failed: {response.status_code} {response.text}")

        try:
            return response.json()
        except ValueError as e:
            raise PRFetchError(f"invalid JSON from {url}: {e}") from e


def pulls_path(repo: Repository) -> str:
    return f"/repos/{repo.owner}/{repo.name}/pulls"


def fetch_merged_prs(client: GitHubRestClient, repo: Repository, max_prs: int) -> list:
    """
    Fetch the most recently updated closed PRs of a repository and keep the merged ones

    Args:
        client: REST client used for the request
        repo: Repository to query
        max_prs: Number of closed PRs to request (single page)

    Returns:
        List of raw PR dictionaries, all with a non-null merged_at

    Raises:
        ValueError: If max_prs or the repository name is invalid
        PRFetchError: On network failure, non-2xx status or malformed body
    """
    if isinstance(max_prs, bool) or not isinstance(max_prs, int) or max_prs <= 0:
        raise ValueError(f"max_prs must be a positive integer, got {max_prs!r}")
    for value in (repo.owner, repo.name):
        if not value or not NAME_PATTERN.match(value):
            raise ValueError(f"invalid repository name: {repo.full_name!r}")

    params = {
        "state": "closed",
        "sort": "updated",
        "direction": "desc",
        "per_page": max_prs,
    }
    prs = client.get_json(pulls_path(repo), params)

    if not isinstance(prs, list) or not all(isinstance(pr, dict) for pr in prs):
        raise PRFetchError(f"unexpected response for {repo.full_name}: expected a list of pull requests")

    # Closed but unmerged PRs have merged_at == null
    merged = [pr for pr in prs if pr.get("merged_at") is not None]
    for pr in merged:
        check_pr_shape(pr, repo)

    return merged


def check_pr_shape(pr: dict, repo: Repository) -> None:
    """Raise PRFetchError when a merged PR lacks the fields its feed item needs"""
    prefix = f"malformed pull request #{pr.get('number', '?')} in {repo.full_name}"

    for key in ("title", "html_url"):
        if not isinstance(pr.get(key), str):
            raise PRFetchError(f"{prefix}: '{key}' is not a string")
    if not pr["html_url"]:
        raise PRFetchError(f"{prefix}: 'html_url' is empty")

    user = pr.get("user")
    if user is None:
        return
    if not isinstance(user, dict):
        raise PRFetchError(f"{prefix}: 'user' is not an object")
    if user.get("login") is not None and not isinstance(user["login"], str):
        raise PRFetchError(f"{prefix}: 'user.login' is not a string")
