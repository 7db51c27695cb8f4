from __future__ import annotations

import logging
from collections.abc import Callable

from src.domain.entities.region import (
    MIN_SIZE,
    Bounds,
    DragSession,
    Handle,
    PointerEvent,
    Rect,
)
from src.domain.errors import IllegalDragStart
from src.domain.services.geometry_service import GeometryService

logger = logging.getLogger(__name__)

PointerHandler = Callable[[PointerEvent], None]


class PointerChannel:
    """Global pointer listeners (the window-level move/up/cancel stream).

    The rendering layer emits every raw event here; only an active drag keeps
    handlers subscribed.
    """

    KINDS = ("move", "up", "cancel")

    def __init__(self) -> None:
        self._listeners: dict[str, list[PointerHandler]] = {kind: [] for kind in self.KINDS}

    def subscribe(self, kind: str, handler: PointerHandler) -> None:
        self._listeners[kind].append(handler)

    def unsubscribe(self, kind: str, handler: PointerHandler) -> None:
        if handler in self._listeners[kind]:
            self._listeners[kind].remove(handler)

    def emit(self, kind: str, event: PointerEvent) -> None:
        for handler in list(self._listeners[kind]):
            handler(event)

    @property
    def listener_count(self) -> int:
        return sum(len(handlers) for handlers in self._listeners.values())


class DragSessionController:
    """Idle -> Active -> Idle state machine for one handle manipulation.

    Every move recomputes the rectangle from the session's anchor region plus
    the pointer delta: resize (or translate for ``move``), aspect lock, clamp,
    then ratio enforcement. The result is published through ``on_update``.
    """

    def __init__(
        self,
        on_update: Callable[[Rect], None],
        channel: PointerChannel | None = None,
        min_size: float = MIN_SIZE,
    ) -> None:
        self._on_update = on_update
        self.channel = channel or PointerChannel()
        self.min_size = min_size
        self._session: DragSession | None = None
        self._container: Bounds | None = None
        self._ratio: float | None = None

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    def begin(
        self,
        handle: Handle,
        event: PointerEvent,
        container: Bounds,
        region: Rect,
        ratio: float | None = None,
    ) -> DragSession:
        if self._session is not None:
            logger.warning("Rejected drag on %s: %s drag still active", handle.value, self._session.handle.value)
            raise IllegalDragStart("A drag session is already active")
        anchor = GeometryService.pointer_to_local(event, container)
        self._session = DragSession(handle=handle, anchor_pointer=anchor, anchor_region=region)
        self._container = container
        self._ratio = ratio
        self.channel.subscribe("move", self._handle_move)
        self.channel.subscribe("up", self._handle_end)
        self.channel.subscribe("cancel", self._handle_end)
        return self._session

    def move(self, event: PointerEvent, container: Bounds | None = None) -> Rect | None:
        session = self._session
        if session is None or self._container is None:
            return None
        if container is not None:
            self._container = container
        pointer = GeometryService.pointer_to_local(event, self._container)
        dx = pointer.x - session.anchor_pointer.x
        dy = pointer.y - session.anchor_pointer.y

        if session.handle is Handle.MOVE:
            rect = session.anchor_region.translated(dx, dy)
            rect = GeometryService.clamp_region(
                rect, self._container, self.min_size, translate=True, ratio=self._ratio
            )
        else:
            rect = GeometryService.resize_with_handle(session.anchor_region, session.handle, dx, dy)
            rect = GeometryService.apply_aspect_lock(rect, self._ratio, session.handle)
            rect = GeometryService.clamp_region(
                rect, self._container, self.min_size, ratio=self._ratio, handle=session.handle
            )
            rect = GeometryService.enforce_ratio(rect, self._ratio, session.handle)
        self._on_update(rect)
        return rect

    def update_container(self, container: Bounds) -> None:
        if self._session is not None:
            self._container = container

    def end(self) -> None:
        if self._session is None:
            return
        self.channel.unsubscribe("move", self._handle_move)
        self.channel.unsubscribe("up", self._handle_end)
        self.channel.unsubscribe("cancel", self._handle_end)
        self._session = None
        self._container = None
        self._ratio = None

    # --------- channel handlers ---------
    def _handle_move(self, event: PointerEvent) -> None:
        self.move(event)

    def _handle_end(self, event: PointerEvent) -> None:
        self.end()
