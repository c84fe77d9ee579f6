"""Tests for the HTML index page"""

import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from src.config import FeedConfig, Repository
from src.index_builder import RepositoryStats, render_index, write_index

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestRenderIndex(unittest.TestCase):
    """Test index rendering"""

    def setUp(self):
        self.feed_config = FeedConfig(title="Merged PRs", description="Daily digest")
        self.stats = [
            RepositoryStats(
                repository=Repository(owner="acme", name="widget", description="Widget <lib>"),
                pr_count=3,
                filename="acme-widget.xml",
                last_updated=NOW,
            ),
            RepositoryStats(
                repository=Repository(owner="acme", name="gadget", description="Gadgets"),
                pr_count=5,
                filename="acme-gadget.xml",
                last_updated=NOW,
            ),
        ]

    def test_per_repository_page(self):
        html = render_index(self.stats, self.feed_config, NOW)

        self.assertIn("<title>Merged PRs</title>", html)
        self.assertIn("Daily digest", html)
        self.assertIn("2024-06-01 12:00:00 UTC", html)
        self.assertIn("<strong>2</strong>", html)
        self.assertIn("acme/widget", html)
        self.assertIn('href="acme-widget.xml"', html)
        self.assertIn('href="acme-gadget.xml"', html)
        self.assertIn("PRs: 3 | Updated: 06/01 12:00", html)
        self.assertNotIn("<script", html)

    def test_escapes_descriptions(self):
        html = render_index(self.stats, self.feed_config, NOW)
        self.assertIn("Widget &lt;lib&gt;", html)

    def test_combined_page_shows_total(self):
        html = render_index(self.stats, self.feed_config, NOW, combined_filename="feed.xml")

        self.assertIn("<strong>8</strong>", html)
        self.assertIn('href="feed.xml"', html)

    def test_empty_stats(self):
        html = render_index([], self.feed_config, NOW)

        self.assertIn("<strong>0</strong>", html)
        self.assertNotIn("repository-card\">", html)

    def test_write_index_overwrites(self):
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "index.html").write_text("old")

            path = write_index("<html></html>", Path(tmp))

            self.assertEqual(path.name, "index.html")
            self.assertEqual(path.read_text(encoding="utf-8"), "<html></html>")


if __name__ == "__main__":
    unittest.main()
