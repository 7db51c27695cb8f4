from __future__ import annotations

from dataclasses import dataclass

FILTERS = ("none", "grayscale", "sepia", "invert")


@dataclass(frozen=True)
class AdjustmentState:
    """Photo panel slider positions. Reset whenever the displayed version changes."""

    brightness: float = 0.0  # -100..100
    contrast: float = 0.0  # -100..100
    saturation: float = 0.0  # -100..100
    blur: int = 0  # radius in pixels, 0..20
    filter: str = "none"

    @property
    def is_neutral(self) -> bool:
        return (
            self.brightness == 0
            and self.contrast == 0
            and self.saturation == 0
            and self.blur == 0
            and self.filter == "none"
        )
