"""Login and logout endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from microblog.dependencies import get_blog, require_authoring
from microblog.models.auth import LoginRequest, LoginResponse
from microblog.services.auth import verify_password
from microblog.services.blog import BlogContext
from microblog.services.errors import CryptoUnavailableError
from microblog.services.session_store import SESSION_COOKIE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

LOGIN_FAILED = "Login failed!"


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    request: Request,
    blog: BlogContext = Depends(require_authoring),
):
    """Check the management password and start a session."""
    config = blog.config
    if not verify_password(credentials.password, config.password_hash, config.salt):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning("Failed login from %s", client_ip)
        raise HTTPException(status_code=401, detail=LOGIN_FAILED)

    try:
        token = blog.sessions.create(config.password_hash)
    except CryptoUnavailableError:
        logger.error("couldn't read cryptographically secure rand, session aborted")
        raise HTTPException(status_code=401, detail=LOGIN_FAILED) from None

    response.set_cookie(
        SESSION_COOKIE,
        token,
        path="/",
        max_age=int(blog.settings.session_ttl),
        secure=blog.settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(message="Login succeeded!")


@router.post("/logout", response_model=LoginResponse)
def logout(request: Request, response: Response, blog: BlogContext = Depends(get_blog)):
    """End the current session, if any."""
    blog.sessions.discard(request.cookies.get(SESSION_COOKIE))
    response.delete_cookie(SESSION_COOKIE, path="/")
    return LoginResponse(message="Logged out")
