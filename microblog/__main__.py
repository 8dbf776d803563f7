"""Run the microblog server.

Usage:
    python -m microblog --password secret
    python -m microblog --password secret --posts-dir ./posts --port 8080
    python -m microblog --view-only

Flags override the ``MICROBLOG_*`` environment variables.
"""

import argparse
import logging
import sys

import uvicorn

from microblog.config import Settings
from microblog.main import create_app
from microblog.middleware import RequestIDFilter

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(request_id)s): %(message)s"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="microblog", description=__doc__.splitlines()[0])
    parser.add_argument("--title", help="specifies the blog title")
    parser.add_argument("--password", help="specifies the management password")
    parser.add_argument("--port", type=int, help="port to listen on")
    parser.add_argument("--host", help="interface to bind")
    parser.add_argument("--posts-dir", help="directory holding the .md posts")
    parser.add_argument(
        "--view-only",
        action="store_true",
        default=None,
        help="disable login and authoring",
    )
    return parser.parse_args(argv)


def _setup_logging(debug: bool) -> None:
    handler = logging.StreamHandler()
    handler.addFilter(RequestIDFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, handlers=[handler])


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    overrides = {
        key: value
        for key, value in vars(args).items()
        if value is not None
    }
    settings = Settings(**overrides)
    _setup_logging(settings.debug)

    if not settings.password and not settings.view_only:
        logging.getLogger("microblog").error("management password is required")
        return 1

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
