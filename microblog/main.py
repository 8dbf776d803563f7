"""
Microblog API

Serves flat-file markdown posts with a password-protected authoring flow.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI

from microblog import __version__
from microblog.config import Settings, get_settings
from microblog.dependencies import get_blog
from microblog.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from microblog.routers import auth, posts
from microblog.services.blog import BlogContext

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the services, load the post index, run the background jobs."""
    settings: Settings = app.state.settings
    blog = BlogContext.from_settings(settings)
    app.state.blog = blog
    blog.start_jobs()
    logger.info("%s serving %s on port %d", blog.config.title, blog.config.posts_dir, blog.config.port)
    try:
        yield
    finally:
        blog.stop_jobs()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI app.

    Services are attached to ``app.state.blog`` by the lifespan handler;
    tests may attach a ``BlogContext`` directly instead.
    """
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.title,
        description="Flat-file markdown blog",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(SecurityHeadersMiddleware)
    # Request ID is added last so it runs outermost
    app.add_middleware(RequestIDMiddleware)

    app.include_router(posts.router)
    app.include_router(auth.router)

    @app.get("/api/health")
    def health_check(blog: BlogContext = Depends(get_blog)) -> dict[str, Any]:
        """Report index and session state."""
        snapshot = blog.cache.get()
        return {
            "status": "ok",
            "service": "microblog",
            "version": __version__,
            "posts": len(snapshot),
            "sessions": len(blog.sessions),
            "index_generation": blog.cache.generation,
            "index_built_at": snapshot.built_at,
            "view_only": blog.config.view_only,
        }

    return app
