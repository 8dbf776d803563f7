"""Shared fixtures for microblog tests."""

import pytest

from microblog.config import Settings

HELLO_POST = """\
### hello
###### Wed, 05 Feb 2025 17:54:14 GMT
---
Hello, world!"""

OLDER_POST = """\
### older
###### Mon, 03 Feb 2025 09:00:00 GMT
---
An *older* post."""

UNDATED_POST = """\
### undated
---
No timestamp line."""

TEST_PASSWORD = "correct horse"


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset module-level caches between tests."""
    yield

    from microblog.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
def posts_dir(tmp_path):
    """A post directory with three valid posts."""
    directory = tmp_path / "posts"
    directory.mkdir()
    (directory / "hello.md").write_text(HELLO_POST)
    (directory / "older.md").write_text(OLDER_POST)
    (directory / "undated.md").write_text(UNDATED_POST)
    return directory


@pytest.fixture
def mock_settings(posts_dir, monkeypatch):
    """Provide a Settings object with safe test defaults."""
    from microblog.config import get_settings

    test_settings = Settings(
        title="Test Blog",
        password=TEST_PASSWORD,
        posts_dir=str(posts_dir),
        refresh_interval=3600,
        session_sweep_interval=3600,
        session_ttl=3600,
        cookie_secure=False,
        _env_file=None,
    )

    get_settings.cache_clear()
    monkeypatch.setattr("microblog.config.get_settings", lambda: test_settings)
    monkeypatch.setattr("microblog.main.get_settings", lambda: test_settings)
    return test_settings


@pytest.fixture
def blog(mock_settings):
    """A fully loaded BlogContext without background jobs."""
    from microblog.services.blog import BlogContext

    return BlogContext.from_settings(mock_settings)


@pytest.fixture
def app(blog):
    """An app wired to the test BlogContext (lifespan is not run)."""
    from microblog.main import create_app

    application = create_app(blog.settings)
    application.state.blog = blog
    return application


@pytest.fixture
def session_cookie(blog):
    """Cookie header value for a freshly created session."""
    from microblog.services.session_store import SESSION_COOKIE

    token = blog.sessions.create(blog.config.password_hash)
    return {"Cookie": f"{SESSION_COOKIE}={token}"}
