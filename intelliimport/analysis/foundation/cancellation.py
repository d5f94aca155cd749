"""
Cooperative cancellation for auto-import queries.

A query checks its token once per file and once per symbol; a cancelled
token unwinds the whole query with ``OperationCanceledError``.
"""

from __future__ import annotations

import threading
import time
from typing import Optional


class OperationCanceledError(Exception):
    """Raised when a query observes a cancelled token."""

    pass


class CancellationToken:
    """Read-only view of a cancellation flag with an optional deadline."""

    def __init__(self, deadline: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = deadline

    @property
    def is_cancellation_requested(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def _cancel(self) -> None:
        self._event.set()


class CancellationTokenSource:
    """
    Owner side of a token.

    Args:
        timeout: seconds after which the token reports cancellation on its own
    """

    def __init__(self, timeout: Optional[float] = None):
        deadline = time.monotonic() + timeout if timeout is not None else None
        self._token = CancellationToken(deadline)

    @property
    def token(self) -> CancellationToken:
        return self._token

    def cancel(self) -> None:
        self._token._cancel()


def throw_if_cancellation_requested(token: Optional[CancellationToken]) -> None:
    """Raise ``OperationCanceledError`` if ``token`` was cancelled. ``None`` never cancels."""
    if token is not None and token.is_cancellation_requested:
        raise OperationCanceledError("auto-import query was cancelled")
