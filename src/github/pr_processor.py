"""Turn raw Pull Request payloads into sorted feed records"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone

from src.config import Repository


# RFC 3339 date-time, e.g. 2024-05-01T12:30:00Z or 2024-05-01T12:30:00.123+09:00
RFC3339_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


@dataclass
class PRRecord:
    """A merged PR, independent of the feed format it ends up in"""
    title: str
    url: str
    merged_at: datetime
    author: str
    repository: str
    description: str


def parse_time(timestamp: str, now: datetime) -> datetime:
    """
    Parse GitHub's RFC 3339 timestamp format.

    Unparseable values fall back to `now` instead of failing, so the PR is
    kept but sorts as if it had just been merged.
    """
    if isinstance(timestamp, str) and RFC3339_PATTERN.match(timestamp):
        value = timestamp.upper()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        # Older fromisoformat wants exactly 3 or 6 fractional digits
        value = re.sub(r"\.(\d+)", lambda m: "." + (m.group(1) + "000000")[:6], value)
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass

    print(f"Failed to parse timestamp {timestamp!r}, using current time")
    return now


def build_pr_records(prs: list, repo: Repository, now: datetime) -> list:
    """
    Map raw PR dictionaries of one repository to PRRecords.

    Args:
        prs: Merged PRs as returned by fetch_merged_prs
        repo: Repository the PRs belong to
        now: Fallback time for unparseable merge timestamps

    Returns:
        List of PRRecord, in input order
    """
    records = []
    for pr in prs:
        author = "unknown"
        user = pr.get("user")
        if isinstance(user, dict) and isinstance(user.get("login"), str) and user["login"]:
            author = user["login"]

        title = pr.get("title")
        if not isinstance(title, str) or not title:
            title = f"Pull request #{pr.get('number', '?')}"

        url = pr.get("html_url")
        records.append(PRRecord(
            title=title,
            url=url if isinstance(url, str) else "",
            merged_at=parse_time(pr["merged_at"], now),
            author=author,
            repository=repo.full_name,
            description=repo.description,
        ))

    return records


def sort_records(records: list) -> list:
    """Return records ordered by merge time, most recent first"""
    return sorted(records, key=lambda r: as_utc(r.merged_at), reverse=True)


def merge_records(*groups) -> list:
    """Combine record lists from several repositories into one sorted list"""
    combined = []
    for group in groups:
        combined.extend(group)
    return sort_records(combined)


def as_utc(value: datetime) -> datetime:
    """Convert to UTC; naive values (only possible via a naive `now`) are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
