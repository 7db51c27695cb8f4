from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from src.domain.errors import OperationPending


class ExclusiveSession:
    """Only one transform or commit may be outstanding per history.

    While one is, competing operations are rejected with ``OperationPending``
    instead of queued.
    """

    def __init__(self) -> None:
        self._pending: str | None = None

    @property
    def pending(self) -> str | None:
        return self._pending

    def _require_idle(self) -> None:
        if self._pending is not None:
            raise OperationPending(f"'{self._pending}' is still running")

    @contextmanager
    def _exclusive(self, label: str) -> Iterator[None]:
        self._require_idle()
        self._pending = label
        try:
            yield
        finally:
            self._pending = None
