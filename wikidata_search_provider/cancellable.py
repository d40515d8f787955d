from __future__ import annotations

import threading


class Cancellable:
    """
    Cooperative cancellation flag for one outstanding search request.

    Cancelling never aborts the underlying HTTP call; whoever finishes the
    work is expected to check ``is_cancelled()`` before producing effects.
    A child is also considered cancelled once its parent is.
    """

    __slots__ = ("_event", "_parent")

    def __init__(self, parent: Cancellable | None = None) -> None:
        self._event = threading.Event()
        self._parent = parent

    def cancel(self) -> None:
        # idempotent
        self._event.set()

    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.is_cancelled()

    def __repr__(self) -> str:
        return f"<Cancellable cancelled={self.is_cancelled()}>"
