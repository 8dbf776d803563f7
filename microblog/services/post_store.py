"""Filesystem-backed post storage.

One post per ``.md`` file in a flat directory. Writes keep a single
generation of history: the file being replaced (or deleted) is renamed to
``<name>.old`` first. This is not transactional: a crash between the
rename and the write can leave no live copy of the post.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from urllib.parse import quote_plus

from microblog.services.errors import (
    EmptyPostError,
    PostNotFoundError,
    StorageError,
)
from microblog.services.post_parser import (
    POST_EXTENSION,
    Post,
    PostHeader,
    build_post,
    parse_header,
    parse_post,
)

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".old"


def filename_for_title(title: str) -> str:
    """Derive the post filename from its title (lower-cased, URL-escaped)."""
    return quote_plus(title.lower()) + POST_EXTENSION


class PostStore:
    """Reads and writes post files under a single directory."""

    def __init__(self, posts_dir: str | Path, extension: str = POST_EXTENSION) -> None:
        self.posts_dir = Path(posts_dir)
        self.extension = extension

    def list_filenames(self) -> list[str]:
        """Return the base names of all post files, sorted."""
        if not self.posts_dir.is_dir():
            raise StorageError(f"Post directory {self.posts_dir} does not exist")
        try:
            return sorted(
                p.name for p in self.posts_dir.glob(f"*{self.extension}") if p.is_file()
            )
        except OSError as e:
            raise StorageError(f"Could not list {self.posts_dir}: {e}") from e

    def _path_for(self, name: str) -> Path:
        # Only plain base names with the post extension map onto the directory
        if (
            not name
            or name != os.path.basename(name)
            or name in (".", "..")
            or not name.endswith(self.extension)
        ):
            raise PostNotFoundError(name)
        return self.posts_dir / name

    def _read(self, name: str) -> bytes:
        path = self._path_for(name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise PostNotFoundError(name) from None
        except IsADirectoryError:
            raise PostNotFoundError(name) from None
        except OSError as e:
            raise StorageError(f"Could not read {name}: {e}") from e

    def read_header(self, name: str) -> PostHeader:
        return parse_header(self._read(name), name)

    def read_post(self, name: str) -> Post:
        return parse_post(self._read(name), name)

    def _backup(self, path: Path) -> bool:
        """Move *path* aside to its ``.old`` name, replacing any older backup.

        Best effort: a failed rename is indistinguishable from there being
        no previous file, so it is logged and not raised.
        """
        backup = path.with_name(path.name + BACKUP_SUFFIX)
        try:
            backup.unlink()
        except OSError as e:
            logger.debug("No previous backup removed for %s: %s", path.name, e)
        try:
            path.rename(backup)
        except OSError as e:
            logger.debug("Could not back up %s: %s", path.name, e)
            return False
        return True

    def write(self, title: str, text: str, now: datetime | None = None) -> str:
        """Publish a post and return its filename.

        An existing post with the same derived filename is kept as a
        ``.old`` backup before the new content is written.

        Raises:
            EmptyPostError: if the title or the text is empty.
            StorageError: if the new file cannot be written.
        """
        # A newline in the title would break the header block
        title = " ".join(title.splitlines()).strip()
        if not title or not text:
            raise EmptyPostError("Post can't be empty")

        filename = filename_for_title(title)
        path = self._path_for(filename)
        if self._backup(path):
            logger.info("Backed up previous version of %s", filename)

        try:
            with open(path, "w", encoding="utf-8", newline="\n") as f:
                f.write(build_post(title, text, now))
        except OSError as e:
            raise StorageError(f"Could not write {filename}: {e}") from e

        logger.info("Published post %s", filename)
        return filename

    def delete(self, name: str) -> None:
        """Retire a post by renaming it to its ``.old`` backup name.

        Raises:
            PostNotFoundError: if no live post exists under *name*.
            StorageError: if the post could not be moved aside.
        """
        path = self._path_for(name)
        if not path.is_file():
            raise PostNotFoundError(name)
        if not self._backup(path):
            raise StorageError(f"Could not move {name} aside")
        logger.info("Deleted post %s", name)
