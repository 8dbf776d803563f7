"""In-memory post index.

The cache holds one immutable ``PostSnapshot`` behind a single reference.
``refresh()`` builds a complete new snapshot off to the side and swaps the
reference as its last step, so readers always see either the old or the
new snapshot in full. Concurrent refreshes are not serialized; whichever
finishes last wins.
"""

import logging
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from microblog.services.post_parser import PostHeader, parse_timestamp
from microblog.services.post_store import PostStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostSnapshot:
    """Point-in-time view of all valid posts, sorted newest first."""

    names: frozenset[str] = field(default_factory=frozenset)
    headers: tuple[PostHeader, ...] = ()
    built_at: float = 0.0

    @classmethod
    def empty(cls) -> "PostSnapshot":
        return cls()

    def __contains__(self, filename: object) -> bool:
        return filename in self.names

    def __len__(self) -> int:
        return len(self.headers)

    def has_slug(self, slug: str) -> bool:
        return any(h.slug == slug for h in self.headers)

    def find(self, slug: str) -> PostHeader | None:
        for header in self.headers:
            if header.slug == slug:
                return header
        return None


def _sort_key(header: PostHeader) -> tuple:
    ts = parse_timestamp(header.timestamp)
    if ts is None:
        return (0,)
    return (1, -ts.timestamp())


def sort_headers(headers: Iterable[PostHeader]) -> list[PostHeader]:
    """Sort headers newest first.

    Headers whose timestamp does not parse go before every parsable one,
    in their original relative order.
    """
    return sorted(headers, key=_sort_key)


class PostCache:
    """Holds the current ``PostSnapshot`` and rebuilds it from a ``PostStore``.

    Usage::

        cache = PostCache(store)
        cache.refresh()        # read every header from disk
        snapshot = cache.get() # never touches disk
    """

    def __init__(self, store: PostStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._snapshot = PostSnapshot.empty()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of snapshots published so far."""
        with self._lock:
            return self._generation

    def get(self) -> PostSnapshot:
        """Return the most recently published snapshot."""
        with self._lock:
            return self._snapshot

    def _publish(self, snapshot: PostSnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot
            self._generation += 1

    def build(self) -> PostSnapshot:
        """Read every post header and build a snapshot without publishing it.

        Any read or parse failure aborts the build.
        """
        filenames = self._store.list_filenames()
        headers: list[PostHeader] = []
        for name in filenames:
            try:
                headers.append(self._store.read_header(name))
            except Exception:
                logger.error("Refresh aborted: could not read post %s", name)
                raise
        return PostSnapshot(
            names=frozenset(filenames),
            headers=tuple(sort_headers(headers)),
            built_at=time.time(),
        )

    def refresh(self) -> PostSnapshot:
        """Rebuild the snapshot from disk and swap it in.

        On failure the previous snapshot stays live and the error propagates.
        """
        snapshot = self.build()
        self._publish(snapshot)
        logger.debug("Post index refreshed: %d posts", len(snapshot))
        return snapshot
