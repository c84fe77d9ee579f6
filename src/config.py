"""Centralized configuration for the merged PR feed generator"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from src.errors import ConfigError


# =============================================================================
# Base Paths
# =============================================================================

DEFAULT_CONFIG_PATH = Path("config.yaml")
DEFAULT_OUTPUT_DIR = Path("docs")
TEMPLATES_DIR = Path(__file__).parent / "templates"


# =============================================================================
# GitHub Configuration
# =============================================================================

# API
GITHUB_API_URL = "https://api.github.com"
GITHUB_WEB_URL = "https://github.com"
GITHUB_ACCEPT_HEADER = "application/vnd.github.v3+json"
USER_AGENT = "pr-feeds/0.1"

# Budget for each outbound request, in seconds
REQUEST_TIMEOUT_SECONDS = 30

DEFAULT_MAX_PRS = 30

# Owner and repository names as accepted in API path segments
NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


# =============================================================================
# Output Configuration
# =============================================================================

INDEX_FILENAME = "index.html"
COMBINED_FEED_BASENAME = "feed"
DEFAULT_MODE = "per-repository"
DEFAULT_FORMAT = "rss"


# =============================================================================
# Config file model
# =============================================================================

@dataclass(frozen=True)
class Repository:
    """A GitHub repository to monitor"""
    owner: str
    name: str
    description: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class AuthorConfig:
    name: str = ""
    email: str = ""


@dataclass
class FeedConfig:
    """Feed-level metadata shared by every generated document"""
    title: str
    description: str = ""
    link: str = ""
    author: AuthorConfig = field(default_factory=AuthorConfig)
    mode: Optional[str] = None
    format: Optional[str] = None


@dataclass
class Config:
    repositories: list
    rss: FeedConfig
    max_prs: int = DEFAULT_MAX_PRS


def _require_mapping(value, section: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{section}' must be a mapping")
    return value


def _require_string(value, key: str, required: bool = False) -> str:
    if value is None:
        if required:
            raise ConfigError(f"'{key}' is required")
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string")
    if required and not value.strip():
        raise ConfigError(f"'{key}' must not be empty")
    return value


def _parse_repository(entry, index: int) -> Repository:
    if not isinstance(entry, dict):
        raise ConfigError(f"repositories[{index}] must be a mapping")

    owner = _require_string(entry.get("owner"), f"repositories[{index}].owner", required=True)
    name = _require_string(entry.get("name"), f"repositories[{index}].name", required=True)

    for key, value in (("owner", owner), ("name", name)):
        if not NAME_PATTERN.match(value):
            raise ConfigError(f"repositories[{index}].{key} is not a valid GitHub name: {value!r}")

    description = _require_string(entry.get("description"), f"repositories[{index}].description")
    return Repository(owner=owner, name=name, description=description)


def parse_config(data) -> Config:
    """
    Build a Config from an already-parsed YAML document.

    Raises:
        ConfigError: If a section is missing or has the wrong shape
    """
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")

    raw_repos = data.get("repositories")
    if not isinstance(raw_repos, list) or not raw_repos:
        raise ConfigError("'repositories' must be a non-empty list")
    repositories = [_parse_repository(entry, i) for i, entry in enumerate(raw_repos)]

    rss = _require_mapping(data.get("rss"), "rss")
    author = _require_mapping(rss.get("author"), "rss.author")
    feed_config = FeedConfig(
        title=_require_string(rss.get("title"), "rss.title", required=True),
        description=_require_string(rss.get("description"), "rss.description"),
        link=_require_string(rss.get("link"), "rss.link", required=True),
        author=AuthorConfig(
            name=_require_string(author.get("name"), "rss.author.name"),
            email=_require_string(author.get("email"), "rss.author.email"),
        ),
        mode=rss.get("mode"),
        format=rss.get("format"),
    )

    github = _require_mapping(data.get("github"), "github")
    max_prs = github.get("max_prs", DEFAULT_MAX_PRS)
    # bool is an int subclass; reject it explicitly
    if isinstance(max_prs, bool) or not isinstance(max_prs, int) or max_prs <= 0:
        raise ConfigError(f"'github.max_prs' must be a positive integer, got {max_prs!r}")

    return Config(repositories=repositories, rss=feed_config, max_prs=max_prs)


def load_config(path=DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from a YAML file

    Args:
        path: Path to the YAML configuration file

    Returns:
        Parsed Config

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    return parse_config(data)
