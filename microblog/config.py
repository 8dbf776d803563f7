"""Application configuration via environment variables."""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

from microblog.services.auth import SALT_BYTES, calc_hash, random_bytes

DEFAULT_TITLE = "Microblog"


class Settings(BaseSettings):
    """Application settings loaded from environment (``MICROBLOG_*``)."""

    # App
    debug: bool = False
    title: str = DEFAULT_TITLE
    host: str = "0.0.0.0"
    port: int = 8080

    # Posts
    posts_dir: str = "posts"
    view_only: bool = False
    refresh_interval: float = 30  # seconds

    # Authoring
    password: str = ""
    session_ttl: float = 3600  # seconds
    session_sweep_interval: float = 60  # seconds
    cookie_secure: bool = True

    model_config = {"env_file": ".env", "env_prefix": "MICROBLOG_", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class BlogConfiguration:
    """Process-wide blog configuration, fixed once the server starts."""

    title: str
    password_hash: str
    salt: bytes
    port: int
    posts_dir: Path
    view_only: bool = False


def build_blog_configuration(settings: Settings) -> BlogConfiguration:
    """Hash the management password with a fresh salt.

    A view-only blog needs no password; its hash is left empty so no login
    can ever match.

    Raises:
        ValueError: if no password is configured for an editable blog.
        CryptoUnavailableError: if no salt could be generated.
    """
    if not settings.password and not settings.view_only:
        raise ValueError("management password is required")
    salt = random_bytes(SALT_BYTES)
    password_hash = calc_hash(settings.password, salt) if settings.password else ""
    return BlogConfiguration(
        title=settings.title,
        password_hash=password_hash,
        salt=salt,
        port=settings.port,
        posts_dir=Path(settings.posts_dir),
        view_only=settings.view_only,
    )
