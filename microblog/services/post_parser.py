"""Post file parser: splits a markdown post into header block and body.

A post on disk looks like::

    ### <title>
    ###### <timestamp>
    ---
    <markdown body>

The timestamp line is optional. Everything here is pure: callers pass the
raw file contents in and get structured data back, no filesystem access.
"""

import email.utils
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import quote

import markdown

from microblog.services.errors import MalformedPostError

TITLE_PREFIX = "### "
TIMESTAMP_PREFIX = "###### "
SEPARATOR = "---"
POST_EXTENSION = ".md"

MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]

RFC1123_RE = re.compile(
    r"^(Mon|Tue|Wed|Thu|Fri|Sat|Sun), \d{2} "
    r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec) \d{4} "
    r"\d{2}:\d{2}:\d{2} [A-Z]{3,5}$"
)


@dataclass(frozen=True)
class PostHeader:
    """Listing metadata for a post, without its body."""

    title: str
    timestamp: str
    slug: str
    content_index: int = 0

    @property
    def url(self) -> str:
        return f"/posts/{quote(self.slug, safe='')}"


@dataclass(frozen=True)
class Post:
    header: PostHeader
    body: str
    html: str


def slug_for(filename: str) -> str:
    """Strip the post extension from a filename."""
    if filename.endswith(POST_EXTENSION):
        return filename[: -len(POST_EXTENSION)]
    return filename


def render_markdown(text: str) -> str:
    """Render a post body to HTML with raw HTML escaped, not passed through.

    ``Markdown`` instances carry per-conversion state, so each call builds
    its own.
    """
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS)
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md.convert(text)


def format_timestamp(dt: datetime | None = None) -> str:
    """Format *dt* (default: now) as an RFC 1123 date in GMT.

    ``email.utils`` is used instead of ``strftime`` so day and month names
    stay English regardless of the process locale.
    """
    if dt is None:
        dt = datetime.now(timezone.utc)
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return email.utils.format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def parse_timestamp(text: str) -> datetime | None:
    """Parse an RFC 1123 timestamp, returning None when it is not one.

    Only the exact ``Day, DD Mon YYYY HH:MM:SS ZONE`` shape is accepted;
    ``email.utils`` alone would also take zone-less or two-digit-year dates.
    Zone abbreviations unknown to ``email.utils`` come back naive; those
    are read as UTC so every result is comparable.
    """
    if not text or not RFC1123_RE.fullmatch(text):
        return None
    try:
        dt = email.utils.parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _split_lines(data: bytes | str) -> list[str]:
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedPostError(f"Post is not valid UTF-8: {e}") from e
    return data.replace("\r", "").split("\n")


def _header_from_lines(lines: list[str], filename: str) -> PostHeader:
    try:
        index = lines.index(SEPARATOR)
    except ValueError:
        raise MalformedPostError("Invalid post format, missing separator") from None
    if index == 0 or len(lines) < 2:
        raise MalformedPostError("Invalid post format, missing title line")

    timestamp = ""
    if index >= 2:
        timestamp = lines[1].removeprefix(TIMESTAMP_PREFIX)

    return PostHeader(
        title=lines[0].removeprefix(TITLE_PREFIX),
        timestamp=timestamp,
        slug=slug_for(filename),
        content_index=index + 1,
    )


def parse_header(data: bytes | str, filename: str) -> PostHeader:
    """Parse the header block of a post file.

    Raises:
        MalformedPostError: if the separator line is absent, is the first
            line, or the document has fewer than two lines.
    """
    return _header_from_lines(_split_lines(data), filename)


def parse_post(
    data: bytes | str,
    filename: str,
    render: Callable[[str], str] = render_markdown,
) -> Post:
    """Parse a full post: header plus the body rendered to HTML."""
    lines = _split_lines(data)
    header = _header_from_lines(lines, filename)
    body = "\n".join(lines[header.content_index :])
    return Post(header=header, body=body, html=render(body))


def build_post(title: str, text: str, now: datetime | None = None) -> str:
    """Build the on-disk text for a new post, header block included."""
    return (
        f"{TITLE_PREFIX}{title}\n"
        f"{TIMESTAMP_PREFIX}{format_timestamp(now)}\n"
        f"{SEPARATOR}\n"
        f"{text}"
    )
