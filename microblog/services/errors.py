"""Exception types shared by the post and session services."""


class BlogError(Exception):
    """Base class for all microblog service errors."""


class MalformedPostError(BlogError, ValueError):
    """A post file is missing its title line or header separator."""


class PostNotFoundError(BlogError, LookupError):
    """No live post file exists under the requested name."""


class EmptyPostError(BlogError, ValueError):
    """A post was submitted without a title or without body text."""


class StorageError(BlogError, OSError):
    """The post directory could not be listed, read or written."""


class CryptoUnavailableError(BlogError, RuntimeError):
    """The system entropy source could not supply random bytes."""
