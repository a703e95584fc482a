"""Cooperative cancellation shared between the worker and the front end."""

from __future__ import annotations

import threading
from typing import Callable, List

from .errors import OperationCancelled


class CancellationToken:
    """Thread-safe cancel flag with close-on-cancel callbacks.

    The worker checks ``raise_if_cancelled`` at its checkpoints. Callbacks
    registered with ``on_cancel`` run once when ``cancel`` is called, which
    lets a blocked network read be interrupted by closing its response.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            try:
                callback()
            except Exception:
                pass

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation cancelled")

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it.

        If the token is already cancelled the callback runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def _unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return _unregister
        callback()
        return lambda: None

    def wait(self, timeout: float) -> bool:
        return self._event.wait(timeout)


__all__ = ["CancellationToken"]
