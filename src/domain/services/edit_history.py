from __future__ import annotations

from typing import Generic, TypeVar

from src.domain.errors import EmptyHistoryError, HistoryAlreadySeeded

T = TypeVar("T")


class EditHistory(Generic[T]):
    """Linear undo/redo timeline of versions with a cursor.

    Content-agnostic: the photo editor stores ``ArtifactVersion`` values, the
    image generator stores whole image sets. Pushing after an undo discards the
    redo branch; there is no tree history.

    Invariants once non-empty: ``0 <= cursor < len(history)`` and
    ``current() is versions[cursor]``.
    """

    def __init__(self) -> None:
        self._versions: list[T] = []
        self._cursor: int = -1

    def __len__(self) -> int:
        return len(self._versions)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def is_empty(self) -> bool:
        return not self._versions

    @property
    def versions(self) -> tuple[T, ...]:
        return tuple(self._versions)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._versions) - 1

    def seed(self, initial: T) -> None:
        if self._versions:
            raise HistoryAlreadySeeded("History already holds versions; use reset()")
        self._versions = [initial]
        self._cursor = 0

    def push(self, version: T) -> None:
        # truncate the redo branch before appending
        if self._cursor < len(self._versions) - 1:
            del self._versions[self._cursor + 1 :]
        self._versions.append(version)
        self._cursor = len(self._versions) - 1

    def undo(self) -> T | None:
        """Step back one version. Returns None when there is nothing to undo."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._versions[self._cursor]

    def redo(self) -> T | None:
        """Step forward one version. Returns None when there is nothing to redo."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._versions[self._cursor]

    def current(self) -> T:
        if not self._versions:
            raise EmptyHistoryError("History is empty")
        return self._versions[self._cursor]

    def reset(self, initial: T) -> None:
        self._versions = [initial]
        self._cursor = 0
