"""Render PR records into RSS 2.0 or Atom 1.0 feed documents"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from feedgen.feed import FeedGenerator

from src.config import COMBINED_FEED_BASENAME, GITHUB_WEB_URL, FeedConfig, Repository
from src.errors import FeedRenderError
from src.github.pr_processor import as_utc


class FeedFormat(Enum):
    RSS = "rss"
    ATOM = "atom"

    @property
    def extension(self) -> str:
        return "xml" if self is FeedFormat.RSS else "atom"


@dataclass
class FeedAuthor:
    name: str = ""
    email: str = ""


@dataclass
class FeedItem:
    title: str
    link: str
    description: str
    author: FeedAuthor
    published: datetime


@dataclass
class Feed:
    title: str
    link: str
    description: str
    author: FeedAuthor
    created: datetime
    items: list = field(default_factory=list)


def item_description(record) -> str:
    """Sentence shown as the body of each feed item"""
    text = f"Merged by {record.author} in {record.repository}"
    if record.description:
        text += f" - {record.description}"
    return text


def _item_from_record(record, title: str) -> FeedItem:
    return FeedItem(
        title=title,
        link=record.url,
        description=item_description(record),
        author=FeedAuthor(name=record.author),
        published=record.merged_at,
    )


def build_repository_feed(records: list, repo: Repository, feed_config: FeedConfig, now: datetime) -> Feed:
    """
    Build the feed for a single repository

    Args:
        records: PRRecords of the repository, already sorted
        repo: Repository the feed describes
        feed_config: Feed metadata from the config file
        now: Creation time of the document

    Returns:
        Feed with one item per record, bare PR titles
    """
    description = f"Recent merged pull requests from {repo.full_name}"
    if repo.description:
        description += f" - {repo.description}"

    return Feed(
        title=f"{feed_config.title} - {repo.full_name} Merged PRs",
        link=f"{GITHUB_WEB_URL}/{repo.full_name}",
        description=description,
        author=FeedAuthor(name=feed_config.author.name, email=feed_config.author.email),
        created=now,
        items=[_item_from_record(r, r.title) for r in records],
    )


def build_combined_feed(records: list, feed_config: FeedConfig, now: datetime) -> Feed:
    """Build one feed spanning every repository; item titles carry a [owner/name] prefix"""
    return Feed(
        title=feed_config.title,
        link=feed_config.link,
        description=feed_config.description or feed_config.title,
        author=FeedAuthor(name=feed_config.author.name, email=feed_config.author.email),
        created=now,
        items=[_item_from_record(r, f"[{r.repository}] {r.title}") for r in records],
    )


def feed_filename(repo: Optional[Repository], fmt: FeedFormat = FeedFormat.RSS) -> str:
    """File name of a repository feed, or of the combined feed when repo is None"""
    if repo is None:
        return f"{COMBINED_FEED_BASENAME}.{fmt.extension}"
    return f"{repo.owner}-{repo.name}.{fmt.extension}"


def _generator(feed: Feed) -> FeedGenerator:
    """Load a Feed into a FeedGenerator; dates are pinned so output depends only on the Feed"""
    fg = FeedGenerator()
    fg.load_extension("dc")
    fg.id(feed.link)
    fg.title(feed.title)
    fg.link(href=feed.link, rel="alternate")
    fg.description(feed.description)
    if feed.author.name:
        author = {"name": feed.author.name}
        if feed.author.email:
            author["email"] = feed.author.email
        fg.author(author)
    if feed.author.email:
        fg.managingEditor(_rss_person(feed.author))
    created = as_utc(feed.created)
    fg.pubDate(created)
    fg.lastBuildDate(created)
    fg.updated(created)

    for item in feed.items:
        published = as_utc(item.published)
        entry = fg.add_entry(order="append")
        entry.id(item.link)
        entry.guid(item.link, permalink=True)
        entry.title(item.title)
        entry.link(href=item.link, rel="alternate")
        entry.description(item.description, isSummary=True)
        if item.author.name:
            entry.dc.dc_creator(item.author.name)
        entry.published(published)
        entry.updated(published)

    return fg


def _rss_person(author: FeedAuthor) -> str:
    if author.name:
        return f"{author.email} ({author.name})"
    return author.email


def to_rss(feed: Feed) -> str:
    """Serialize a Feed as an RSS 2.0 document"""
    return _generator(feed).rss_str(pretty=True).decode("utf-8")


def to_atom(feed: Feed) -> str:
    """Serialize a Feed as an Atom 1.0 document"""
    return _generator(feed).atom_str(pretty=True).decode("utf-8")


def render_feed(feed: Feed, fmt: FeedFormat = FeedFormat.RSS) -> str:
    if fmt is FeedFormat.ATOM:
        return to_atom(feed)
    return to_rss(feed)


def write_feed(feed: Feed, path: Path, fmt: FeedFormat = FeedFormat.RSS) -> None:
    """
    Render a feed and overwrite the file at path

    Raises:
        FeedRenderError: If rendering or writing fails
    """
    try:
        content = render_feed(feed, fmt)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
    except (OSError, ValueError, TypeError) as e:
        raise FeedRenderError(f"cannot write {path}: {e}") from e
