"""Cooperative cancellation for long-running searches."""

import threading


class Status:
    """
    Cancellation flag shared between a search and its controller.

    The controller calls cancel(); the search polls get() between
    restarts and Powell iterations. A search that consumes a cancellation
    calls reset(), so one request aborts only the search in progress.
    """

    def __init__(self):
        self._event = threading.Event()

    def get(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def reset(self) -> None:
        self._event.clear()

    def __repr__(self) -> str:
        return f"Status(cancelled={self.get()})"
