"""Per-process service container: config, post store, index cache, sessions.

One ``BlogContext`` is built at startup and hung off ``app.state``; routers
reach it through dependencies instead of module-level globals, so tests can
run against independent instances.
"""

import logging
from dataclasses import dataclass, field

from microblog.config import BlogConfiguration, Settings, build_blog_configuration
from microblog.services.post_cache import PostCache
from microblog.services.post_store import PostStore
from microblog.services.scheduler import PeriodicJob
from microblog.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class BlogContext:
    config: BlogConfiguration
    settings: Settings
    store: PostStore
    cache: PostCache
    sessions: SessionStore
    jobs: list[PeriodicJob] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BlogContext":
        """Build the services and load the initial post index.

        Raises if the password is missing, no salt can be generated, or the
        first refresh fails. The server must not start in any of those cases.
        """
        config = build_blog_configuration(settings)
        store = PostStore(config.posts_dir)
        cache = PostCache(store)
        cache.refresh()
        logger.info("Loaded %d posts from %s", len(cache.get()), config.posts_dir)
        return cls(
            config=config,
            settings=settings,
            store=store,
            cache=cache,
            sessions=SessionStore(),
        )

    def start_jobs(self) -> None:
        ttl = self.settings.session_ttl
        self.jobs = [
            PeriodicJob("post-refresh", self.settings.refresh_interval, self.cache.refresh),
            PeriodicJob(
                "session-sweep",
                self.settings.session_sweep_interval,
                lambda: self.sessions.sweep(ttl),
            ),
        ]
        for job in self.jobs:
            job.start()

    def stop_jobs(self) -> None:
        for job in self.jobs:
            job.stop()
        self.jobs = []
