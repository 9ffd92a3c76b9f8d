"""Cooperative cancellation"""

import threading


class CancellationToken:
    """Flag polled by the pipeline between steps

    Safe to set from a signal handler or another thread.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()
