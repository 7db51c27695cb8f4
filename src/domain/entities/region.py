from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

MIN_SIZE = 20.0


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Selection rectangle in display coordinates (the CropRegion)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def area(self) -> float:
        return self.width * self.height

    def translated(self, dx: float, dy: float) -> Rect:
        return Rect(self.x + dx, self.y + dy, self.width, self.height)


@dataclass(frozen=True)
class Bounds:
    """Container bounding box in screen space, supplied by the rendering layer."""

    left: float
    top: float
    width: float
    height: float

    @property
    def is_renderable(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class PixelRect:
    """Integer rectangle in the artifact's native resolution."""

    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class TouchPoint:
    client_x: float
    client_y: float


@dataclass(frozen=True)
class PointerEvent:
    """Mouse or touch input. Touch events carry their points in ``touches``."""

    client_x: float = 0.0
    client_y: float = 0.0
    touches: tuple[TouchPoint, ...] = field(default_factory=tuple)


class Handle(str, Enum):
    MOVE = "move"
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def is_corner(self) -> bool:
        return "-" in self.value

    @property
    def affects_top(self) -> bool:
        return "top" in self.value

    @property
    def affects_bottom(self) -> bool:
        return "bottom" in self.value

    @property
    def affects_left(self) -> bool:
        return "left" in self.value

    @property
    def affects_right(self) -> bool:
        return "right" in self.value


@dataclass(frozen=True)
class AspectLock:
    """Fixed width:height ratio, e.g. ``AspectLock.parse("16:9")``."""

    width: float
    height: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.width) and math.isfinite(self.height)):
            raise ValueError("aspect ratio terms must be finite")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("aspect ratio terms must be > 0")
        ratio = self.width / self.height
        if ratio == 0 or not math.isfinite(ratio):
            raise ValueError("aspect ratio is out of range")

    @property
    def ratio(self) -> float:
        return self.width / self.height

    @property
    def label(self) -> str:
        return f"{self.width:g}:{self.height:g}"

    @classmethod
    def parse(cls, value: str) -> AspectLock:
        parts = value.split(":")
        if len(parts) != 2:
            raise ValueError(f"Invalid aspect ratio: {value!r}")
        try:
            w, h = float(parts[0]), float(parts[1])
        except ValueError as exc:
            raise ValueError(f"Invalid aspect ratio: {value!r}") from exc
        return cls(w, h)


# Presets offered by the photo panel (None = freeform)
ASPECT_PRESETS: dict[str, AspectLock | None] = {
    "freeform": None,
    "1:1": AspectLock(1, 1),
    "16:9": AspectLock(16, 9),
    "9:16": AspectLock(9, 16),
}


@dataclass(frozen=True)
class DragSession:
    """State of one pointer-driven manipulation, from pointer-down to pointer-up.

    ``anchor_region`` is never mutated; every move is recomputed from it plus
    the pointer delta.
    """

    handle: Handle
    anchor_pointer: Point
    anchor_region: Rect
