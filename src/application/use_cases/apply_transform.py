from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from src.domain.errors import TransformFailed
from src.domain.services.edit_history import EditHistory

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ApplyTransformUseCase(Generic[T]):
    """
    Run an external transform/generation call and record its result.

    The collaborator is awaited first; history is only touched once it has
    resolved. If it rejects or raises, ``TransformFailed`` is raised and the
    previous ``current()`` stays displayed.
    """

    history: EditHistory[T]

    async def execute(self, transform: Callable[[T], Awaitable[T]]) -> T:
        """Transform the current version and push the result."""
        source = self.history.current()
        return await self.record(lambda: transform(source))

    async def record(self, produce: Callable[[], Awaitable[T]]) -> T:
        """Push whatever ``produce`` yields (generation with no input version)."""
        try:
            result = await produce()
        except Exception as exc:
            logger.warning("Transform failed: %s", exc)
            raise TransformFailed(str(exc)) from exc
        self.history.push(result)
        return result
