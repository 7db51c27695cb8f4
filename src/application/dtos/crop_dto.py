from __future__ import annotations

from pydantic import BaseModel, Field

from src.domain.entities.region import Bounds, Handle, PointerEvent, Rect, TouchPoint


class RectModel(BaseModel):
    """Crop region in display coordinates, relative to the container."""
    x: float = Field(..., description="Left edge", examples=[40.0])
    y: float = Field(..., description="Top edge", examples=[30.0])
    width: float = Field(..., description="Region width", examples=[320.0])
    height: float = Field(..., description="Region height", examples=[240.0])

    @classmethod
    def from_entity(cls, rect: Rect) -> RectModel:
        return cls(x=rect.x, y=rect.y, width=rect.width, height=rect.height)


class BoundsModel(BaseModel):
    """On-screen box of the rendered image, in client coordinates."""
    left: float = Field(0.0, description="Left offset of the container", examples=[100.0])
    top: float = Field(0.0, description="Top offset of the container", examples=[80.0])
    width: float = Field(..., description="Rendered width", examples=[400.0], ge=0)
    height: float = Field(..., description="Rendered height", examples=[300.0], ge=0)

    def to_entity(self) -> Bounds:
        return Bounds(left=self.left, top=self.top, width=self.width, height=self.height)


class TouchModel(BaseModel):
    client_x: float = Field(..., description="Touch X in client coordinates")
    client_y: float = Field(..., description="Touch Y in client coordinates")


class PointerEventModel(BaseModel):
    """Raw mouse or touch event; the first touch point wins when present."""
    client_x: float = Field(0.0, description="Pointer X in client coordinates", examples=[460.0])
    client_y: float = Field(0.0, description="Pointer Y in client coordinates", examples=[350.0])
    touches: list[TouchModel] = Field(default_factory=list, description="Active touch points")

    def to_entity(self) -> PointerEvent:
        return PointerEvent(
            client_x=self.client_x,
            client_y=self.client_y,
            touches=tuple(TouchPoint(t.client_x, t.client_y) for t in self.touches),
        )


class StartCropRequest(BaseModel):
    """Request model for entering cropping mode."""
    bounds: BoundsModel | None = Field(None, description="Rendered container; omitted while the image is not laid out")


class AspectLockRequest(BaseModel):
    """Request model for changing the aspect lock."""
    ratio: str | None = Field(None, description="Ratio as W:H, or null for freeform", examples=["16:9"])


class PointerDownRequest(BaseModel):
    """Request model for grabbing a crop handle."""
    handle: Handle = Field(..., description="Handle that was grabbed", examples=["bottom-right"])
    event: PointerEventModel = Field(..., description="The pointer-down event")
    container: BoundsModel | None = Field(None, description="Current container box, if it changed")


class PointerMoveRequest(BaseModel):
    """Request model for a pointer move or release."""
    event: PointerEventModel = Field(default_factory=PointerEventModel, description="The pointer event")
    container: BoundsModel | None = Field(None, description="Current container box, if it changed")


class CropStateResponse(BaseModel):
    """Crop tool state of a photo session."""
    cropping: bool = Field(..., description="Whether cropping mode is active")
    region: RectModel | None = Field(None, description="Current region, null outside cropping mode")
    aspect: str | None = Field(None, description="Active aspect lock as W:H, null when freeform", examples=["1:1"])
    dragging: bool = Field(False, description="Whether a drag session is active")
    handle: Handle | None = Field(None, description="Handle of the active drag")
