from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.application.dtos.artifact_dto import ArtifactMetadata
from src.application.dtos.history_dto import HistoryState
from src.domain.entities.adjustments import AdjustmentState


class AdjustmentsModel(BaseModel):
    """Photo panel slider positions and filter preset."""
    brightness: float = Field(0.0, description="Brightness offset", examples=[20.0], ge=-100, le=100)
    contrast: float = Field(0.0, description="Contrast offset", examples=[-10.0], ge=-100, le=100)
    saturation: float = Field(0.0, description="Saturation offset", examples=[35.0], ge=-100, le=100)
    blur: int = Field(0, description="Blur radius in pixels", examples=[2], ge=0, le=20)
    filter: str = Field("none", description="Filter preset", examples=["sepia"], pattern="^(none|grayscale|sepia|invert)$")

    @classmethod
    def from_entity(cls, state: AdjustmentState) -> AdjustmentsModel:
        return cls(
            brightness=state.brightness,
            contrast=state.contrast,
            saturation=state.saturation,
            blur=state.blur,
            filter=state.filter,
        )

    def to_entity(self) -> AdjustmentState:
        return AdjustmentState(
            brightness=self.brightness,
            contrast=self.contrast,
            saturation=self.saturation,
            blur=self.blur,
            filter=self.filter,
        )


class AdjustmentsRequest(AdjustmentsModel):
    """Request model for updating or baking adjustments."""
    apply: bool = Field(True, description="Bake into a new version (true) or only store the slider state (false)")


class SessionResponse(BaseModel):
    """Snapshot of a photo editing session."""
    id: str = Field(..., description="Session identifier", examples=["9d2c41e07a5b4c1f"])
    current: ArtifactMetadata = Field(..., description="Metadata of the current version")
    history: HistoryState = Field(..., description="Cursor position in the edit history")
    cropping: bool = Field(..., description="Whether cropping mode is active")
    pending: str | None = Field(None, description="Operation still running, if any", examples=["remove_background"])
    adjustments: AdjustmentsModel = Field(..., description="Current slider positions")


class TransformRequest(BaseModel):
    """Request model for a mock AI transform."""
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Operation-specific parameters",
        examples=[{"style": "Vintage"}],
    )


class TransformListResponse(BaseModel):
    transforms: list[str] = Field(..., description="Names of the available transforms", examples=[["remove_background", "pixelate"]])
