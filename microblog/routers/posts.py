"""Post endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from fastapi.responses import HTMLResponse

from microblog.dependencies import get_blog, require_session
from microblog.models.post import (
    CreatePostRequest,
    CreatePostResponse,
    PostDetail,
    PostIndex,
    PostSummary,
)
from microblog.services.blog import BlogContext
from microblog.services.errors import (
    BlogError,
    EmptyPostError,
    PostNotFoundError,
)
from microblog.services.post_parser import POST_EXTENSION, Post, render_markdown, slug_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

GENERIC_ERROR = "Something went wrong, please check back later!"


def _load_post(blog: BlogContext, slug: str) -> Post:
    """Read a post that the current snapshot knows about."""
    filename = f"{slug}{POST_EXTENSION}"
    # Only names from the last directory listing are ever opened
    if filename not in blog.cache.get():
        raise HTTPException(status_code=404, detail="Post not found!")
    try:
        return blog.store.read_post(filename)
    except PostNotFoundError:
        logger.warning("Post %s is indexed but missing on disk", filename)
        raise HTTPException(status_code=404, detail="Post not found!")
    except BlogError:
        logger.exception("Failed to read post %s", filename)
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)


@router.get("", response_model=PostIndex)
def list_posts(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    blog: BlogContext = Depends(get_blog),
):
    """Get the post index, newest first."""
    snapshot = blog.cache.get()
    page = snapshot.headers[offset : offset + limit]
    return PostIndex(
        posts=[PostSummary.from_header(h) for h in page],
        total=len(snapshot),
    )


@router.get("/{slug}/content")
def get_post_content(
    slug: str = Path(..., min_length=1, max_length=600),
    blog: BlogContext = Depends(get_blog),
):
    """Serve the rendered post body as HTML."""
    post = _load_post(blog, slug)
    return HTMLResponse(content=post.html)


@router.get("/{slug}", response_model=PostDetail)
def get_post(
    slug: str = Path(..., min_length=1, max_length=600),
    blog: BlogContext = Depends(get_blog),
):
    """Get a single post by its slug."""
    return PostDetail.from_post(_load_post(blog, slug))


@router.post("", response_model=CreatePostResponse)
def create_post(
    form: CreatePostRequest,
    blog: BlogContext = Depends(require_session),
):
    """Preview a post, or publish it when ``publish`` is set.

    Publishing writes through the store and refreshes the index before
    returning, so the new post is listed immediately.
    """
    html = render_markdown(form.text)
    if not form.publish:
        return CreatePostResponse(status="preview", title=form.title, html=html)

    try:
        filename = blog.store.write(form.title, form.text)
    except EmptyPostError:
        raise HTTPException(status_code=400, detail="Post can't be empty")
    except BlogError:
        logger.exception("Failed to publish post %r", form.title)
        raise HTTPException(status_code=500, detail="Failed to publish post!")

    _refresh_index(blog)

    slug = slug_for(filename)
    header = blog.cache.get().find(slug)
    return CreatePostResponse(
        status="published",
        title=header.title if header else form.title,
        html=html,
        slug=slug,
        url=header.url if header else None,
    )


@router.delete("/{slug}")
def delete_post(
    slug: str = Path(..., min_length=1, max_length=600),
    blog: BlogContext = Depends(require_session),
):
    """Retire a post (kept on disk as a ``.old`` backup)."""
    filename = f"{slug}{POST_EXTENSION}"
    try:
        blog.store.delete(filename)
    except PostNotFoundError:
        raise HTTPException(status_code=404, detail="Post not found!")
    except BlogError:
        logger.exception("Failed to delete post %s", filename)
        raise HTTPException(status_code=500, detail=GENERIC_ERROR)

    _refresh_index(blog)
    return {"status": "deleted", "slug": slug}


def _refresh_index(blog: BlogContext) -> None:
    try:
        blog.cache.refresh()
    except Exception:
        logger.exception("Failed to refresh post index after write")
        raise HTTPException(
            status_code=500, detail="Failed to update list of published posts!"
        )
