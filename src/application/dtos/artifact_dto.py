from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.entities.artifact import ArtifactVersion


class ArtifactMetadata(BaseModel):
    """Metadata of one artifact version; the bytes are served separately."""
    id: str = Field(..., description="Unique identifier of the version", examples=["3f2b9c0d8e1a4f6b"])
    media_type: str = Field(..., description="MIME type of the payload", examples=["image/png"])
    size: int = Field(..., description="Payload size in bytes", examples=[204857], ge=0)
    width: int | None = Field(None, description="Raster width in pixels", examples=[800])
    height: int | None = Field(None, description="Raster height in pixels", examples=[600])
    annotation: str | None = Field(None, description="How this version was produced", examples=["cropped image"])
    created_at: datetime = Field(..., description="ISO timestamp when the version was created")

    @classmethod
    def from_entity(
        cls, artifact: ArtifactVersion, width: int | None = None, height: int | None = None
    ) -> ArtifactMetadata:
        return cls(
            id=artifact.id,
            media_type=artifact.media_type,
            size=artifact.size,
            width=width,
            height=height,
            annotation=artifact.annotation,
            created_at=artifact.created_at,
        )
