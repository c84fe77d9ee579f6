"""Build the HTML index page listing every generated feed"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from src.config import INDEX_FILENAME, TEMPLATES_DIR, FeedConfig, Repository
from src.errors import IndexRenderError

GENERATED_AT_FORMAT = "%Y-%m-%d %H:%M:%S %Z"
LAST_UPDATED_FORMAT = "%m/%d %H:%M"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    keep_trailing_newline=True,
)


@dataclass
class RepositoryStats:
    """Per-repository summary shown on the index page"""
    repository: Repository
    pr_count: int
    filename: str
    last_updated: datetime


def render_index(stats: list, feed_config: FeedConfig, now: datetime,
                 combined_filename: Optional[str] = None) -> str:
    """
    Render the index page.

    Args:
        stats: RepositoryStats for every repository whose feed was produced
        feed_config: Feed metadata (page title and description)
        now: Generation time shown on the page
        combined_filename: Combined feed file; switches the page to combined mode

    Returns:
        HTML document as a string

    Raises:
        IndexRenderError: If the template cannot be loaded or rendered
    """
    try:
        template = _env.get_template(INDEX_FILENAME)
        return template.render(
            title=feed_config.title,
            description=feed_config.description,
            generated_at=now.strftime(GENERATED_AT_FORMAT).strip(),
            combined_filename=combined_filename,
            repository_count=len(stats),
            total_prs=sum(s.pr_count for s in stats),
            repositories=[
                {
                    "full_name": s.repository.full_name,
                    "description": s.repository.description,
                    "pr_count": s.pr_count,
                    "last_updated": s.last_updated.strftime(LAST_UPDATED_FORMAT),
                    "filename": s.filename,
                }
                for s in stats
            ],
        )
    except TemplateError as e:
        raise IndexRenderError(f"cannot render index: {e}") from e


def write_index(html: str, output_dir: Path) -> Path:
    """Overwrite index.html in output_dir and return its path"""
    path = Path(output_dir) / INDEX_FILENAME
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(html)
    except OSError as e:
        raise IndexRenderError(f"cannot write {path}: {e}") from e
    return path
