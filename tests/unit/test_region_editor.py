from unittest.mock import Mock

import pytest

from src.domain.entities.region import AspectLock, Bounds, Handle, PointerEvent, Rect
from src.domain.errors import CroppingInactive, EmptyRegionError, IllegalDragStart
from src.domain.services.region_editor import RegionEditor

CONTAINER = Bounds(left=0, top=0, width=400, height=300)


@pytest.fixture()
def committer():
    return Mock()


@pytest.fixture()
def editor(committer):
    return RegionEditor(committer)


def test_start_without_renderable_bounds_is_a_noop(editor):
    assert editor.start(None) is None
    assert editor.start(Bounds(0, 0, 0, 300)) is None
    assert not editor.is_cropping
    assert editor.region is None


def test_start_sets_default_region_and_clears_lock(editor):
    region = editor.start(CONTAINER)
    assert region == Rect(40, 30, 320, 240)
    assert editor.is_cropping
    assert editor.aspect_lock is None


def test_set_aspect_lock_fits_ratio_around_center(editor):
    editor.start(CONTAINER)
    editor._region = Rect(50, 50, 200, 150)
    out = editor.set_aspect_lock(AspectLock(1, 1))
    assert out == Rect(50, 25, 200, 200)
    assert editor.aspect_lock.label == "1:1"


@pytest.mark.parametrize("ratio", ["inf:1", "nan:1", "1:inf", "1e308:1e-308"])
def test_non_finite_aspect_ratio_is_rejected(ratio):
    with pytest.raises(ValueError):
        AspectLock.parse(ratio)


def test_aspect_lock_too_extreme_for_container_is_rejected(editor):
    editor.start(CONTAINER)
    before = editor.region
    with pytest.raises(ValueError):
        editor.set_aspect_lock(AspectLock.parse("1000:1"))
    assert editor.region == before
    assert editor.aspect_lock is None


def test_clearing_aspect_lock_restores_default_region(editor):
    editor.start(CONTAINER)
    editor.set_aspect_lock(AspectLock(16, 9))
    assert editor.set_aspect_lock(None) == Rect(40, 30, 320, 240)
    assert editor.aspect_lock is None


def test_handle_down_outside_cropping_mode_is_rejected(editor):
    with pytest.raises(CroppingInactive):
        editor.on_handle_down(Handle.LEFT, PointerEvent(client_x=40, client_y=100))


def test_drag_updates_region_and_ends_on_pointer_up(editor):
    channel = editor.drag.channel
    editor.start(CONTAINER)
    editor.on_handle_down(Handle.BOTTOM_RIGHT, PointerEvent(client_x=360, client_y=270))
    channel.emit("move", PointerEvent(client_x=410, client_y=320))
    assert editor.region == Rect(40, 30, 360, 270)
    channel.emit("up", PointerEvent())
    assert not editor.drag.is_active
    assert channel.listener_count == 0
    # moves after release are ignored
    channel.emit("move", PointerEvent(client_x=0, client_y=0))
    assert editor.region == Rect(40, 30, 360, 270)


@pytest.mark.parametrize(
    "handle, start, end, expected",
    [
        (Handle.LEFT, (40, 100), (540, 100), Rect(340, 30, 20, 240)),
        (Handle.TOP, (100, 30), (100, 290), Rect(40, 250, 320, 20)),
    ],
)
def test_dragging_edge_past_opposite_edge_keeps_that_edge(editor, handle, start, end, expected):
    editor.start(CONTAINER)
    editor.on_handle_down(handle, PointerEvent(client_x=start[0], client_y=start[1]))
    editor.drag.channel.emit("move", PointerEvent(client_x=end[0], client_y=end[1]))
    assert editor.region == expected
    assert editor.region.right == 360
    assert editor.region.bottom == 270


def test_second_handle_down_is_rejected(editor):
    editor.start(CONTAINER)
    editor.on_handle_down(Handle.LEFT, PointerEvent(client_x=40, client_y=100))
    with pytest.raises(IllegalDragStart):
        editor.on_handle_down(Handle.RIGHT, PointerEvent(client_x=360, client_y=100))
    assert editor.drag.session.handle is Handle.LEFT


def test_cancel_discards_region_without_committing(editor, committer):
    editor.start(CONTAINER)
    editor.on_handle_down(Handle.MOVE, PointerEvent(client_x=200, client_y=150))
    editor.cancel()
    assert not editor.is_cropping
    assert editor.region is None
    assert not editor.drag.is_active
    committer.commit.assert_not_called()


@pytest.mark.parametrize("region", [Rect(10, 10, 0, 50), Rect(10, 10, 50, 0)])
def test_commit_rejects_empty_region(editor, committer, region):
    editor.start(CONTAINER)
    editor._region = region
    with pytest.raises(EmptyRegionError):
        editor.commit()
    committer.commit.assert_not_called()
    assert editor.is_cropping


def test_commit_hands_region_to_committer_and_exits(editor, committer):
    editor.start(CONTAINER)
    editor.on_handle_down(Handle.BOTTOM_RIGHT, PointerEvent(client_x=360, client_y=270))
    result = editor.commit()
    committer.commit.assert_called_once_with(Rect(40, 30, 320, 240), CONTAINER)
    assert result is committer.commit.return_value
    assert not editor.is_cropping
    assert not editor.drag.is_active


def test_failed_commit_keeps_cropping_mode(editor, committer):
    committer.commit.side_effect = RuntimeError("decode failed")
    editor.start(CONTAINER)
    with pytest.raises(RuntimeError):
        editor.commit()
    assert editor.is_cropping
    assert editor.region == Rect(40, 30, 320, 240)


def test_container_resize_keeps_region_inside(editor):
    editor.start(CONTAINER)
    editor.update_container(Bounds(0, 0, 200, 150))
    region = editor.region
    assert region.right <= 200
    assert region.bottom <= 150
    assert editor.container == Bounds(0, 0, 200, 150)


def test_container_shrink_keeps_locked_ratio(editor):
    editor.start(CONTAINER)
    editor.set_aspect_lock(AspectLock(1, 1))
    editor.update_container(Bounds(0, 0, 400, 100))
    region = editor.region
    assert region.width == pytest.approx(region.height)
    assert region.height == pytest.approx(100)
    assert region.x >= 0 and region.right <= 400
    assert region.y >= 0 and region.bottom <= 100
