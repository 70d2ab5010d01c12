"""Cooperative cancellation for the release pipeline.

SIGINT and SIGTERM only set a flag; the orchestrator checks it between
steps, so a running step (a push, a publish) always completes first.
"""

import logging
import signal
import threading
from types import FrameType, TracebackType

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancellationToken:
    """Flag set by a signal or by ``cancel()``.

    Use as a context manager to install the signal handlers for the
    duration of a pipeline run; previous handlers are restored on exit.
    Handlers are only installed from the main thread.
    """

    def __init__(self) -> None:
        self.reason: str | None = None
        self._previous: dict[int, object] = {}

    @property
    def cancelled(self) -> bool:
        return self.reason is not None

    def cancel(self, reason: str = "cancelled") -> None:
        if self.reason is None:
            self.reason = reason
            logger.warning("Cancellation requested (%s); stopping after the current step", reason)

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        self.cancel(signal.Signals(signum).name)

    def __enter__(self) -> "CancellationToken":
        if threading.current_thread() is threading.main_thread():
            for signum in HANDLED_SIGNALS:
                self._previous[signum] = signal.signal(signum, self._handle)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)  # type: ignore[arg-type]
        self._previous.clear()
