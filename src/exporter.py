"""Generate merged PR feeds and the index page for all configured repositories"""

import argparse
import os
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

from src.config import DEFAULT_CONFIG_PATH, DEFAULT_FORMAT, DEFAULT_MODE, DEFAULT_OUTPUT_DIR, Config, load_config
from src.errors import ConfigError, FeedError, FeedRenderError, OutputDirectoryError, PRFetchError
from src.feed_builder import FeedFormat, build_combined_feed, build_repository_feed, feed_filename, write_feed
from src.github.pr_fetcher import GitHubRestClient, fetch_merged_prs
from src.github.pr_processor import build_pr_records, merge_records, sort_records
from src.index_builder import RepositoryStats, render_index, write_index


class FeedMode(Enum):
    PER_REPOSITORY = "per-repository"
    COMBINED = "combined"


class FeedExporter:
    """Runs the fetch -> transform -> render pipeline once"""

    def __init__(self, config: Config, output_dir, client: GitHubRestClient,
                 mode: FeedMode = FeedMode.PER_REPOSITORY, fmt: FeedFormat = FeedFormat.RSS,
                 now: datetime = None):
        """
        Args:
            config: Parsed configuration
            output_dir: Directory receiving the feeds and index.html
            client: REST client used for every repository
            mode: One feed per repository, or one combined feed
            fmt: Feed serialization format
            now: Run timestamp; defaults to the current UTC time
        """
        self.config = config
        self.output_dir = Path(output_dir)
        self.client = client
        self.mode = mode
        self.fmt = fmt
        self.now = now or datetime.now(timezone.utc)

    def prepare_output_dir(self) -> None:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(f"cannot create {self.output_dir}: {e}") from e

    def fetch_records(self, repo) -> list:
        """Fetch and transform one repository's merged PRs, sorted newest first"""
        prs = fetch_merged_prs(self.client, repo, self.config.max_prs)
        return sort_records(build_pr_records(prs, repo, self.now))

    def export(self) -> list:
        """
        Generate every feed and the index page

        Returns:
            List of RepositoryStats for the repositories that made it into a feed

        Raises:
            OutputDirectoryError: If the output directory cannot be created
            IndexRenderError: If the index page cannot be written
        """
        self.prepare_output_dir()

        if self.mode is FeedMode.COMBINED:
            stats, combined_filename = self._export_combined()
        else:
            stats = self._export_per_repository()
            combined_filename = None

        html = render_index(stats, self.config.rss, self.now, combined_filename=combined_filename)
        write_index(html, self.output_dir)
        return stats

    def _export_per_repository(self) -> list:
        stats = []

        for repo in self.config.repositories:
            try:
                records = self.fetch_records(repo)
            except PRFetchError as e:
                print(f"Failed to fetch PRs for {repo.full_name}: {e}")
                continue

            filename = feed_filename(repo, self.fmt)
            feed = build_repository_feed(records, repo, self.config.rss, self.now)
            try:
                write_feed(feed, self.output_dir / filename, self.fmt)
            except FeedRenderError as e:
                print(f"Failed to generate feed for {repo.full_name}: {e}")
                continue

            stats.append(RepositoryStats(
                repository=repo,
                pr_count=len(records),
                filename=filename,
                last_updated=self.now,
            ))
            print(f"Feed generated for {repo.full_name}: {len(records)} PRs")

        return stats

    def _export_combined(self):
        """Write the combined feed; returns (stats, feed filename or None if it was not written)"""
        filename = feed_filename(None, self.fmt)
        groups = []
        stats = []

        for repo in self.config.repositories:
            try:
                records = self.fetch_records(repo)
            except PRFetchError as e:
                print(f"Failed to fetch PRs for {repo.full_name}: {e}")
                continue

            groups.append(records)
            stats.append(RepositoryStats(
                repository=repo,
                pr_count=len(records),
                filename=filename,
                last_updated=self.now,
            ))
            print(f"Fetched {repo.full_name}: {len(records)} PRs")

        records = merge_records(*groups)
        feed = build_combined_feed(records, self.config.rss, self.now)
        try:
            write_feed(feed, self.output_dir / filename, self.fmt)
        except FeedRenderError as e:
            print(f"Failed to generate combined feed: {e}")
            return [], None

        print(f"Combined feed generated: {len(records)} PRs")
        return stats, filename


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate feeds of merged GitHub pull requests")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to the YAML configuration file")
    parser.add_argument("--output", default=str(DEFAULT_OUTPUT_DIR), help="Directory to write feeds and index.html to")
    parser.add_argument("--mode", choices=[m.value for m in FeedMode],
                        help=f"Feed layout (default: config value or {DEFAULT_MODE})")
    parser.add_argument("--format", choices=[f.value for f in FeedFormat],
                        help=f"Feed format (default: config value or {DEFAULT_FORMAT})")
    return parser.parse_args(argv)


def resolve_options(args, config: Config):
    """Pick mode and format from the command line, then the config file, then defaults"""
    mode = args.mode or config.rss.mode or DEFAULT_MODE
    fmt = args.format or config.rss.format or DEFAULT_FORMAT
    try:
        return FeedMode(mode), FeedFormat(fmt)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        mode, fmt = resolve_options(args, config)
    except ConfigError as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return 1

    client = GitHubRestClient(token=os.getenv("GITHUB_TOKEN"))
    exporter = FeedExporter(config, args.output, client, mode=mode, fmt=fmt)

    try:
        stats = exporter.export()
    except OutputDirectoryError as e:
        print(f"Failed to create output directory: {e}", file=sys.stderr)
        return 1
    except FeedError as e:
        print(f"Failed to generate index: {e}", file=sys.stderr)
        return 1

    print(f"All feeds generated successfully! Total repositories: {len(stats)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
