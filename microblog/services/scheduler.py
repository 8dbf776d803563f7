"""Background periodic jobs (post index refresh, session sweep)."""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class PeriodicJob:
    """Run *func* every *interval* seconds on a daemon thread.

    ``trigger()`` runs the job as soon as possible instead of waiting for the
    next tick. A failing run is logged and the loop keeps going.
    """

    def __init__(self, name: str, interval: float, func: Callable[[], object]) -> None:
        self.name = name
        self.interval = interval
        self._func = func
        # Each started loop owns its events, so a loop still finishing a run
        # after stop() is never revived by a later start()
        self._wake = threading.Event()
        self._stopped = threading.Event()
        self._stopped.set()
        self._thread: threading.Thread | None = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stopped.is_set()
        )

    def start(self) -> None:
        if self.running:
            return
        self._wake = threading.Event()
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._loop,
            args=(self._wake, self._stopped),
            name=self.name,
            daemon=True,
        )
        self._thread.start()
        logger.info("Started %s job (every %ss)", self.name, self.interval)

    def trigger(self) -> None:
        self._wake.set()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stopped.set()
        self._wake.set()
        if self._thread is None:
            return
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("%s job still finishing a run after stop", self.name)
        else:
            self._thread = None

    def run_once(self) -> None:
        try:
            self._func()
        except Exception:
            logger.exception("%s job failed", self.name)
        finally:
            self.runs += 1

    def _loop(self, wake: threading.Event, stopped: threading.Event) -> None:
        while not stopped.is_set():
            wake.wait(self.interval)
            wake.clear()
            if stopped.is_set():
                break
            self.run_once()
