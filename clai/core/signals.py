"""SIGINT/SIGTERM handling.

Handlers only set a shared flag; the pipeline polls it at fixed checkpoints
and raises Interrupted. A request already in flight is not cancelled.
"""

import signal
import threading
from typing import Optional

from clai.core.errors import Interrupted


class InterruptFlag:
    def __init__(self, event: Optional[threading.Event] = None):
        self._event = event or threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def check(self) -> None:
        """Raise Interrupted if a signal has been received."""
        if self._event.is_set():
            raise Interrupted()


def install_signal_handlers(flag: Optional[InterruptFlag] = None) -> InterruptFlag:
    """
    Route SIGINT and SIGTERM to `flag`.

    Must be called from the main thread; elsewhere the flag is returned
    without handlers attached.
    """
    flag = flag or InterruptFlag()

    def _handler(signum, frame):
        flag.set()

    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
    return flag
