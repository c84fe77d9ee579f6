"""GitHub Pull Request fetching and processing"""

from .pr_fetcher import GitHubRestClient, check_pr_shape, fetch_merged_prs
from .pr_processor import PRRecord, as_utc, build_pr_records, merge_records, parse_time, sort_records
