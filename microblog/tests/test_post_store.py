"""Tests for PostStore: filesystem reads, writes and .old backups."""

from datetime import datetime, timezone

import pytest

from microblog.services.errors import (
    EmptyPostError,
    MalformedPostError,
    PostNotFoundError,
    StorageError,
)
from microblog.services.post_store import PostStore, filename_for_title

NOW = datetime(2025, 2, 5, 17, 54, 14, tzinfo=timezone.utc)


def test_list_filenames(posts_dir):
    store = PostStore(posts_dir)
    (posts_dir / "notes.txt").write_text("ignored")
    (posts_dir / "hello.md.old").write_text("ignored")

    assert store.list_filenames() == ["hello.md", "older.md", "undated.md"]


def test_list_filenames_empty_directory(tmp_path):
    assert PostStore(tmp_path).list_filenames() == []


def test_list_filenames_missing_directory(tmp_path):
    with pytest.raises(StorageError):
        PostStore(tmp_path / "nope").list_filenames()


def test_read_header(posts_dir):
    header = PostStore(posts_dir).read_header("hello.md")
    assert header.title == "hello"
    assert header.slug == "hello"


def test_read_missing_post(posts_dir):
    with pytest.raises(PostNotFoundError):
        PostStore(posts_dir).read_post("missing.md")


def test_read_malformed_post(posts_dir):
    (posts_dir / "broken.md").write_text("### broken\nno separator here")
    with pytest.raises(MalformedPostError):
        PostStore(posts_dir).read_header("broken.md")


@pytest.mark.parametrize("name", ["../hello.md", "sub/hello.md", "hello", "", ".."])
def test_read_rejects_non_post_names(posts_dir, name):
    with pytest.raises(PostNotFoundError):
        PostStore(posts_dir).read_post(name)


def test_filename_for_title():
    assert filename_for_title("Hello") == "hello.md"
    assert filename_for_title("Hello World") == "hello+world.md"
    assert filename_for_title("a/b") == "a%2Fb.md"


def test_write_then_read_round_trip(tmp_path):
    store = PostStore(tmp_path)
    filename = store.write("Hello", "World", now=NOW)

    assert filename == "hello.md"
    post = store.read_post(filename)
    assert post.header.title == "Hello"
    assert post.header.timestamp == "Wed, 05 Feb 2025 17:54:14 GMT"
    assert post.header.url == "/posts/hello"
    assert post.body == "World"


def test_write_twice_keeps_one_backup(tmp_path):
    store = PostStore(tmp_path)
    store.write("Hello", "World", now=NOW)
    store.write("Hello", "Second body", now=NOW)

    assert store.list_filenames() == ["hello.md"]
    assert store.read_post("hello.md").body == "Second body"
    assert (tmp_path / "hello.md.old").read_text().endswith("\n---\nWorld")


def test_backup_holds_only_previous_version(tmp_path):
    store = PostStore(tmp_path)
    for body in ("one", "two", "three"):
        store.write("Hello", body, now=NOW)

    assert (tmp_path / "hello.md.old").read_text().endswith("two")
    assert store.read_post("hello.md").body == "three"


@pytest.mark.parametrize("title,text", [("", "body"), ("Title", ""), ("  ", "body")])
def test_write_rejects_empty_post(tmp_path, title, text):
    with pytest.raises(EmptyPostError):
        PostStore(tmp_path).write(title, text)
    assert list(tmp_path.iterdir()) == []


def test_write_flattens_newlines_in_title(tmp_path):
    store = PostStore(tmp_path)
    filename = store.write("two\nlines", "body", now=NOW)

    assert filename == "two+lines.md"
    assert store.read_header(filename).title == "two lines"


def test_write_missing_directory(tmp_path):
    with pytest.raises(StorageError):
        PostStore(tmp_path / "nope").write("Hello", "World")


def test_delete_moves_post_to_backup(posts_dir):
    store = PostStore(posts_dir)
    store.delete("hello.md")

    assert "hello.md" not in store.list_filenames()
    assert (posts_dir / "hello.md.old").exists()


def test_delete_missing_post(posts_dir):
    with pytest.raises(PostNotFoundError):
        PostStore(posts_dir).delete("missing.md")
