from __future__ import annotations

import logging
from typing import Protocol

from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.region import (
    MIN_SIZE,
    AspectLock,
    Bounds,
    DragSession,
    Handle,
    PointerEvent,
    Rect,
)
from src.domain.errors import CroppingInactive, EmptyRegionError
from src.domain.services.drag_session import DragSessionController, PointerChannel
from src.domain.services.geometry_service import GeometryService

logger = logging.getLogger(__name__)


class CropCommitter(Protocol):
    def commit(self, region: Rect, display: Bounds) -> ArtifactVersion: ...


class RegionEditor:
    """The crop tool: owns the selection rectangle while cropping mode is on.

    ``commit()`` hands the display-space region to a ``CropCommitter`` (the
    commit pipeline), which produces and stores the new version. The region is
    never persisted; it is dropped on commit or cancel.
    """

    def __init__(
        self,
        committer: CropCommitter,
        channel: PointerChannel | None = None,
        min_size: float = MIN_SIZE,
        default_fraction: float = 0.8,
    ) -> None:
        self._committer = committer
        self.min_size = min_size
        self.default_fraction = default_fraction
        self.drag = DragSessionController(self._set_region, channel, min_size)
        self._active = False
        self._region: Rect | None = None
        self._aspect: AspectLock | None = None
        self._container: Bounds | None = None

    @property
    def is_cropping(self) -> bool:
        return self._active

    @property
    def region(self) -> Rect | None:
        return self._region

    @property
    def aspect_lock(self) -> AspectLock | None:
        return self._aspect

    @property
    def container(self) -> Bounds | None:
        return self._container

    def start(self, bounds: Bounds | None) -> Rect | None:
        if bounds is None or not bounds.is_renderable:
            # nothing rendered yet
            return None
        self.drag.end()
        self._container = bounds
        self._aspect = None
        self._region = GeometryService.default_region(bounds, self.default_fraction)
        self._active = True
        return self._region

    def update_container(self, bounds: Bounds) -> None:
        if not self._active or not bounds.is_renderable:
            return
        self._container = bounds
        if self.drag.is_active:
            self.drag.update_container(bounds)
        elif self._region is not None and self._aspect is not None:
            self._region = GeometryService.fit_ratio_around_center(
                self._region, self._aspect.ratio, bounds, self.min_size
            )
        elif self._region is not None:
            self._region = GeometryService.clamp_region(
                self._region, bounds, self.min_size, translate=True
            )

    def set_aspect_lock(self, lock: AspectLock | None) -> Rect:
        """Lock the region to ``lock`` (or unlock it with None).

        Raises:
            ValueError: If a region of minimum size at that ratio cannot fit
                the container
        """
        self._require_active()
        if lock is not None and not GeometryService.ratio_fits(lock.ratio, self._container, self.min_size):
            raise ValueError(f"Aspect ratio {lock.label} does not fit the crop area")
        self.drag.end()
        self._aspect = lock
        if lock is None:
            self._region = GeometryService.default_region(self._container, self.default_fraction)
        else:
            self._region = GeometryService.fit_ratio_around_center(
                self._region, lock.ratio, self._container, self.min_size
            )
        return self._region

    def on_handle_down(
        self, handle: Handle, event: PointerEvent, container: Bounds | None = None
    ) -> DragSession:
        self._require_active()
        if container is not None and container.is_renderable:
            self._container = container
        ratio = self._aspect.ratio if self._aspect else None
        return self.drag.begin(handle, event, self._container, self._region, ratio)

    def cancel(self) -> None:
        self.drag.end()
        self._active = False
        self._region = None
        self._aspect = None

    def commit(self) -> ArtifactVersion:
        self._require_active()
        self.drag.end()
        region = self._region
        if region is None or region.width <= 0 or region.height <= 0:
            logger.warning("Rejected commit of empty crop region %s", region)
            raise EmptyRegionError("Crop region has no area")
        version = self._committer.commit(region, self._container)
        self._active = False
        self._region = None
        self._aspect = None
        return version

    # --------- helpers ---------
    def _set_region(self, region: Rect) -> None:
        self._region = region

    def _require_active(self) -> None:
        if not self._active:
            raise CroppingInactive("Cropping mode is not active")
