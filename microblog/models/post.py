"""Post API models."""

from pydantic import BaseModel, Field

from microblog.services.post_parser import Post, PostHeader


class PostSummary(BaseModel):
    """Post metadata for index display."""

    title: str
    timestamp: str
    slug: str
    url: str

    @classmethod
    def from_header(cls, header: PostHeader) -> "PostSummary":
        return cls(
            title=header.title,
            timestamp=header.timestamp,
            slug=header.slug,
            url=header.url,
        )


class PostIndex(BaseModel):
    """Post index."""

    posts: list[PostSummary]
    total: int


class PostDetail(PostSummary):
    """A single post with its rendered body."""

    html: str

    @classmethod
    def from_post(cls, post: Post) -> "PostDetail":
        header = post.header
        return cls(
            title=header.title,
            timestamp=header.timestamp,
            slug=header.slug,
            url=header.url,
            html=post.html,
        )


class CreatePostRequest(BaseModel):
    title: str = Field(default="", max_length=500)
    text: str = ""
    publish: bool = False


class CreatePostResponse(BaseModel):
    """Result of a create call: a preview or the published post's location."""

    status: str
    title: str
    html: str
    slug: str | None = None
    url: str | None = None
