from __future__ import annotations

from pydantic import BaseModel, Field

from src.application.dtos.artifact_dto import ArtifactMetadata
from src.domain.services.edit_history import EditHistory


class HistoryState(BaseModel):
    """Position of the cursor in an edit history timeline."""
    cursor: int = Field(..., description="Index of the current version, -1 when empty", examples=[2], ge=-1)
    length: int = Field(..., description="Number of versions in the timeline", examples=[3], ge=0)
    can_undo: bool = Field(..., description="Whether an older version exists")
    can_redo: bool = Field(..., description="Whether a newer version exists")

    @classmethod
    def from_history(cls, history: EditHistory) -> HistoryState:
        return cls(
            cursor=history.cursor,
            length=len(history),
            can_undo=history.can_undo,
            can_redo=history.can_redo,
        )


class HistoryResponse(BaseModel):
    """Full timeline of a photo session, oldest first."""
    state: HistoryState = Field(..., description="Cursor position and navigation flags")
    versions: list[ArtifactMetadata] = Field(..., description="Every version in the timeline")


class HistoryStepResponse(BaseModel):
    """Result of an undo or redo; a no-op is reported with ``changed`` set to false."""
    changed: bool = Field(..., description="Whether the cursor moved")
    current: ArtifactMetadata | None = Field(None, description="Metadata of the version now current")
    state: HistoryState = Field(..., description="Cursor position after the step")
