from __future__ import annotations

from src.domain.entities.region import (
    Bounds,
    Handle,
    PixelRect,
    Point,
    PointerEvent,
    Rect,
)


class GeometryService:
    """Pure rectangle math for the crop tool.

    Rectangles are display-space ``Rect`` values with float coordinates unless a
    method says otherwise. Nothing here holds state.
    """

    # Edges adjacent to the handle move by (dx, dy); opposite edges stay fixed.
    @staticmethod
    def resize_with_handle(anchor: Rect, handle: Handle, dx: float, dy: float) -> Rect:
        if handle is Handle.MOVE:
            return anchor.translated(dx, dy)
        x, y, w, h = anchor.x, anchor.y, anchor.width, anchor.height
        if handle.affects_right:
            w = anchor.width + dx
        if handle.affects_left:
            w = anchor.width - dx
            x = anchor.x + dx
        if handle.affects_bottom:
            h = anchor.height + dy
        if handle.affects_top:
            h = anchor.height - dy
            y = anchor.y + dy
        return Rect(x, y, w, h)

    # Corners and left/right: width authoritative, height = width / ratio.
    # Top/bottom: height authoritative, width derived and re-centered horizontally.
    @staticmethod
    def apply_aspect_lock(region: Rect, ratio: float | None, handle: Handle) -> Rect:
        if ratio is None or handle is Handle.MOVE:
            return region
        x, y, w, h = region.x, region.y, region.width, region.height
        if handle.is_corner or handle.affects_left or handle.affects_right:
            new_h = w / ratio
            if handle.affects_top:
                y += h - new_h
            h = new_h
        else:
            new_w = h * ratio
            x += (w - new_w) / 2.0
            w = new_w
        return Rect(x, y, w, h)

    # Fit region inside [0, W] x [0, H]. Resizes are capped; moves are translated.
    @staticmethod
    def clamp_region(
        region: Rect,
        bounds: Bounds,
        min_size: float,
        *,
        translate: bool = False,
        ratio: float | None = None,
        handle: Handle | None = None,
    ) -> Rect:
        min_w, min_h = GeometryService.min_size_for_ratio(min_size, ratio)
        cw, ch = bounds.width, bounds.height
        x, y, w, h = region.x, region.y, region.width, region.height
        if translate:
            w = min(max(w, min_w), cw)
            h = min(max(h, min_h), ch)
            return Rect(_clamp(x, 0.0, cw - w), _clamp(y, 0.0, ch - h), w, h)

        if x < 0:
            w += x
            x = 0.0
        if y < 0:
            h += y
            y = 0.0
        if x + w > cw:
            w = cw - x
        if y + h > ch:
            h = ch - y
        # a dragged edge that crossed the opposite one grows back from that edge
        if w < min_w:
            if handle is not None and handle.affects_left:
                x = x + w - min_w
            w = min_w
        if h < min_h:
            if handle is not None and handle.affects_top:
                y = y + h - min_h
            h = min_h
        return Rect(_clamp(x, 0.0, cw - w), _clamp(y, 0.0, ch - h), w, h)

    # Shrink the axis that breaks the ratio, keeping the edge opposite the handle.
    @staticmethod
    def enforce_ratio(region: Rect, ratio: float | None, handle: Handle) -> Rect:
        if ratio is None or region.height <= 0:
            return region
        x, y, w, h = region.x, region.y, region.width, region.height
        current = w / h
        if current > ratio:
            new_w = h * ratio
            if handle.affects_left:
                x += w - new_w
            elif not handle.affects_right:
                x += (w - new_w) / 2.0
            w = new_w
        elif current < ratio:
            new_h = w / ratio
            if handle.affects_top:
                y += h - new_h
            elif not handle.affects_bottom:
                y += (h - new_h) / 2.0
            h = new_h
        return Rect(x, y, w, h)

    # Smallest (w, h) honoring both the minimum size and the ratio.
    @staticmethod
    def min_size_for_ratio(min_size: float, ratio: float | None) -> tuple[float, float]:
        if ratio is None:
            return min_size, min_size
        min_h = max(min_size, min_size / ratio)
        return min_h * ratio, min_h

    @staticmethod
    def ratio_fits(ratio: float, bounds: Bounds, min_size: float) -> bool:
        """Whether a ratio-locked region of minimum size fits inside ``bounds``."""
        min_w, min_h = GeometryService.min_size_for_ratio(min_size, ratio)
        return min_w <= bounds.width and min_h <= bounds.height

    @staticmethod
    def default_region(bounds: Bounds, fraction: float = 0.8) -> Rect:
        w = bounds.width * fraction
        h = bounds.height * fraction
        return Rect((bounds.width - w) / 2.0, (bounds.height - h) / 2.0, w, h)

    @staticmethod
    def fit_ratio_around_center(
        region: Rect, ratio: float, bounds: Bounds, min_size: float
    ) -> Rect:
        """Recompute ``region`` for a newly locked ratio, keeping its center.

        Width stays authoritative and height is derived. When the result no
        longer fits the container it is scaled down, then translated back
        inside. It is grown to the minimum size only when that still fits;
        otherwise containment wins and the region stays below the minimum.
        """
        w = region.width
        h = w / ratio
        scale = min(1.0, bounds.width / w, bounds.height / h)
        w, h = w * scale, h * scale
        min_w, min_h = GeometryService.min_size_for_ratio(min_size, ratio)
        if w < min_w and GeometryService.ratio_fits(ratio, bounds, min_size):
            w, h = min_w, min_h
        x = _clamp(region.center_x - w / 2.0, 0.0, bounds.width - w)
        y = _clamp(region.center_y - h / 2.0, 0.0, bounds.height - h)
        return Rect(x, y, w, h)

    # Mouse and touch both reduce to one (clientX, clientY); touch uses its first point.
    @staticmethod
    def pointer_to_local(event: PointerEvent, container: Bounds) -> Point:
        if event.touches:
            first = event.touches[0]
            client_x, client_y = first.client_x, first.client_y
        else:
            client_x, client_y = event.client_x, event.client_y
        return Point(client_x - container.left, client_y - container.top)

    @staticmethod
    def source_scale(
        native_width: int, native_height: int, display_width: float, display_height: float
    ) -> tuple[float, float]:
        if display_width <= 0 or display_height <= 0:
            raise ValueError("display size must be > 0")
        return native_width / display_width, native_height / display_height

    # Display-space rect -> integer source pixels, clipped to the native raster.
    @staticmethod
    def to_source_space(
        rect: Rect,
        scale_x: float,
        scale_y: float,
        native_width: int | None = None,
        native_height: int | None = None,
    ) -> PixelRect:
        x0 = round(rect.x * scale_x)
        y0 = round(rect.y * scale_y)
        x1 = round(rect.right * scale_x)
        y1 = round(rect.bottom * scale_y)
        if native_width is not None:
            x0, x1 = _clamp(x0, 0, native_width), _clamp(x1, 0, native_width)
        if native_height is not None:
            y0, y1 = _clamp(y0, 0, native_height), _clamp(y1, 0, native_height)
        return PixelRect(int(x0), int(y0), int(max(0, x1 - x0)), int(max(0, y1 - y0)))


# --------- helpers ---------
def _clamp(value, lo, hi):
    # when the container is smaller than the rect, pin to the origin
    return max(lo, min(value, hi))
