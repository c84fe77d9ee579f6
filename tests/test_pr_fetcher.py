"""Tests for the GitHub PR fetcher"""

import unittest
from unittest import mock

import requests

from src.config import Repository
from src.errors import PRFetchError
from src.github.pr_fetcher import GitHubRestClient, fetch_merged_prs


def make_response(status_code=200, payload=None, text=""):
    response = mock.Mock()
    response.status_code = status_code
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


class TestGitHubRestClient(unittest.TestCase):
    """Test request construction"""

    def test_token_sets_bearer_header(self):
        client = GitHubRestClient(token="abc123", session=mock.Mock())
        self.assertEqual(client.headers["Authorization"], "Bearer abc123")

    def test_missing_token_is_unauthenticated(self):
        for token in (None, ""):
            client = GitHubRestClient(token=token, session=mock.Mock())
            self.assertNotIn("Authorization", client.headers)
            self.assertEqual(client.headers["Accept"], "application/vnd.github.v3+json")


class TestFetchMergedPRs(unittest.TestCase):
    """Test fetching and merged-only filtering"""

    def setUp(self):
        self.session = mock.Mock()
        self.client = GitHubRestClient(token="t", session=self.session, timeout=30)
        self.repo = Repository(owner="acme", name="widget", description="Widgets")

    def test_request_parameters(self):
        self.session.get.return_value = make_response(payload=[])

        fetch_merged_prs(self.client, self.repo, 15)

        args, kwargs = self.session.get.call_args
        self.assertEqual(args[0], "https://api.github.com/repos/acme/widget/pulls")
        self.assertEqual(kwargs["params"], {
            "state": "closed",
            "sort": "updated",
            "direction": "desc",
            "per_page": 15,
        })
        self.assertEqual(kwargs["timeout"], 30)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer t")

    def test_unmerged_prs_are_dropped(self):
        self.session.get.return_value = make_response(payload=[
            {"number": 1, "title": "merged", "html_url": "https://github.com/acme/widget/pull/1",
             "merged_at": "2024-01-02T00:00:00Z"},
            {"number": 2, "title": "closed", "merged_at": None},
            {"number": 3, "title": "also merged", "html_url": "https://github.com/acme/widget/pull/3",
             "merged_at": "2024-01-01T00:00:00Z"},
        ])

        prs = fetch_merged_prs(self.client, self.repo, 10)

        self.assertEqual([pr["number"] for pr in prs], [1, 3])
        for pr in prs:
            self.assertIsNotNone(pr["merged_at"])

    def test_http_error_raises(self):
        self.session.get.return_value = make_response(status_code=500, text="boom")

        with self.assertRaises(PRFetchError) as ctx:
            fetch_merged_prs(self.client, self.repo, 10)
        self.assertIn("500", str(ctx.exception))

    def test_network_error_raises(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError("no route")

        with self.assertRaises(PRFetchError):
            fetch_merged_prs(self.client, self.repo, 10)

    def test_timeout_raises(self):
        self.session.get.side_effect = requests.exceptions.Timeout("slow")

        with self.assertRaises(PRFetchError):
            fetch_merged_prs(self.client, self.repo, 10)

    def test_malformed_body_raises(self):
        self.session.get.return_value = make_response(payload=ValueError("bad json"))

        with self.assertRaises(PRFetchError):
            fetch_merged_prs(self.client, self.repo, 10)

    def test_non_list_body_raises(self):
        self.session.get.return_value = make_response(payload={"message": "Not Found"})

        with self.assertRaises(PRFetchError):
            fetch_merged_prs(self.client, self.repo, 10)

    def test_malformed_merged_pr_raises(self):
        base = {
            "number": 7,
            "title": "Add gizmo",
            "html_url": "https://github.com/acme/widget/pull/7",
            "user": {"login": "octocat"},
            "merged_at": "2024-01-02T00:00:00Z",
        }
        overrides = [
            {"user": "octocat"},
            {"user": {"login": 42}},
            {"title": 7},
            {"title": None},
            {"html_url": None},
            {"html_url": ""},
        ]

        for override in overrides:
            self.session.get.return_value = make_response(payload=[dict(base, **override)])
            with self.assertRaises(PRFetchError) as ctx:
                fetch_merged_prs(self.client, self.repo, 10)
            self.assertIn("#7", str(ctx.exception))

    def test_malformed_unmerged_pr_is_ignored(self):
        self.session.get.return_value = make_response(payload=[
            {"number": 2, "title": None, "user": "ghost", "merged_at": None},
        ])

        self.assertEqual(fetch_merged_prs(self.client, self.repo, 10), [])

    def test_missing_user_is_accepted(self):
        pr = {"number": 8, "title": "t", "html_url": "https://github.com/acme/widget/pull/8",
              "user": None, "merged_at": "2024-01-02T00:00:00Z"}
        self.session.get.return_value = make_response(payload=[pr])

        self.assertEqual(fetch_merged_prs(self.client, self.repo, 10), [pr])

    def test_invalid_max_prs(self):
        for value in (0, -1, "10", True):
            with self.assertRaises(ValueError):
                fetch_merged_prs(self.client, self.repo, value)
        self.session.get.assert_not_called()

    def test_invalid_repository_name(self):
        with self.assertRaises(ValueError):
            fetch_merged_prs(self.client, Repository(owner="acme", name="wid/get"), 10)


if __name__ == "__main__":
    unittest.main()
