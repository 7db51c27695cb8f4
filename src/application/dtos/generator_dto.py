from __future__ import annotations

from pydantic import BaseModel, Field

from src.application.dtos.artifact_dto import ArtifactMetadata
from src.application.dtos.history_dto import HistoryState


class GenerateImagesRequest(BaseModel):
    """Request model for generating an image set."""
    prompt: str = Field(..., description="Text prompt", examples=["a lighthouse at dusk"], min_length=1)
    count: int = Field(1, description="Number of images to generate", examples=[2], ge=1, le=4)
    aspect_ratio: str = Field("1:1", description="Output aspect ratio", examples=["16:9"], pattern="^(1:1|16:9|9:16)$")


class OutpaintRequest(BaseModel):
    """Request model for extending one image of the current set."""
    index: int = Field(0, description="Position of the image in the current set", examples=[0], ge=0)
    direction: str = Field(..., description="Side to extend", examples=["right"], pattern="^(left|right|top|bottom)$")


class SubmitJobRequest(BaseModel):
    """Request model for a long-running generation job."""
    prompt: str = Field(..., description="Text prompt", examples=["a drone shot over a forest"], min_length=1)
    aspect_ratio: str = Field("16:9", description="Output aspect ratio", examples=["16:9"], pattern="^(1:1|16:9|9:16)$")


class JobResponse(BaseModel):
    """Poll state of one job."""
    job_id: str = Field(..., description="Job identifier")
    active: bool = Field(..., description="Whether the job is still being polled")
    cancelled: bool = Field(False, description="Whether polling was cancelled")
    attempts: int = Field(0, description="Status polls made so far", ge=0)
    error: str | None = Field(None, description="Failure reason, if the job failed")


class GeneratorStateResponse(BaseModel):
    """Snapshot of an image generator session."""
    id: str = Field(..., description="Session identifier")
    images: list[ArtifactMetadata] = Field(..., description="The current image set")
    history: HistoryState = Field(..., description="Cursor position over generated sets")
    prompts: list[str] = Field(..., description="Recent prompts, most recent first")
    jobs: list[JobResponse] = Field(default_factory=list, description="Jobs submitted in this session")
    pending: str | None = Field(None, description="Operation still running, if any")


class GenerateTemplateRequest(BaseModel):
    """Request model for generating a template."""
    prompt: str = Field(..., description="Text prompt", examples=["summer sale"], min_length=1)
    template_type: str = Field("post", description="Template layout", examples=["story"], pattern="^(story|banner|post)$")


class TemplateStateResponse(BaseModel):
    """Snapshot of a template generator session."""
    id: str = Field(..., description="Session identifier")
    current: ArtifactMetadata | None = Field(None, description="Current template, null before the first generation")
    history: HistoryState = Field(..., description="Cursor position over generated templates")
    pending: str | None = Field(None, description="Operation still running, if any")
