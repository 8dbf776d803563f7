"""FastAPI dependencies for reaching the per-process services."""

import logging

from fastapi import Depends, HTTPException, Request

from microblog.services.blog import BlogContext
from microblog.services.session_store import check_session

logger = logging.getLogger(__name__)


def get_blog(request: Request) -> BlogContext:
    blog = getattr(request.app.state, "blog", None)
    if blog is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return blog


def require_authoring(blog: BlogContext = Depends(get_blog)) -> BlogContext:
    """Reject authoring requests when the blog runs in view-only mode."""
    if blog.config.view_only:
        raise HTTPException(status_code=403, detail="Blog is in view-only mode")
    return blog


def require_session(
    request: Request, blog: BlogContext = Depends(require_authoring)
) -> BlogContext:
    """Require a valid session cookie; anything else is unauthenticated."""
    ok, reason = check_session(request.cookies, blog.sessions)
    if not ok:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, reason)
        raise HTTPException(status_code=401, detail="Login required")
    return blog
