from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, eq=False)
class ArtifactVersion:
    """Immutable snapshot of edited content.

    Versions compare by identity: two snapshots with identical bytes are still
    distinct entries of a history timeline.
    """

    payload: bytes
    media_type: str  # e.g. "image/png"
    annotation: str | None = None  # how this version was produced (prompt, operation)
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)

    @property
    def size(self) -> int:
        return len(self.payload)

    @property
    def extension(self) -> str:
        subtype = self.media_type.split("/")[-1].lower()
        return "jpg" if subtype == "jpeg" else subtype
