import asyncio
from unittest.mock import Mock

import pytest

from src.application.sessions.photo_session import PhotoEditorSession
from src.domain.entities.adjustments import AdjustmentState
from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.region import AspectLock, Bounds, Handle, PointerEvent, Rect
from src.domain.errors import OperationPending, TransformFailed
from src.domain.services.processing_service import ProcessingService
from src.infrastructure.backend.mock_backend import MockGenerationBackend
from src.infrastructure.codec.pillow_codec import PillowRasterCodec

DISPLAY = Bounds(left=0, top=0, width=400, height=300)


@pytest.fixture()
def session(png_bytes):
    codec, processing = PillowRasterCodec(), ProcessingService()
    initial = ArtifactVersion(payload=png_bytes, media_type="image/png")
    return PhotoEditorSession(
        "s1", initial, codec, processing, MockGenerationBackend(codec, processing)
    )


def test_crop_drag_and_commit_pushes_new_version(session):
    original = session.current
    session.start_crop(DISPLAY)
    session.pointer_down(Handle.BOTTOM_RIGHT, PointerEvent(client_x=360, client_y=270))
    region = session.pointer_move(PointerEvent(client_x=310, client_y=220))
    assert region == Rect(40, 30, 270, 190)
    session.pointer_up()
    assert session.channel.listener_count == 0

    version = session.commit_crop()
    assert session.current is version
    assert session.history.versions[0] is original
    assert not session.region_editor.is_cropping

    assert session.undo() is original
    assert session.redo() is version


def test_pointer_move_picks_up_resized_container(session):
    session.start_crop(DISPLAY)
    session.pointer_down(Handle.MOVE, PointerEvent(client_x=200, client_y=150))
    region = session.pointer_move(
        PointerEvent(client_x=200, client_y=150), Bounds(0, 0, 300, 200)
    )
    assert region.right <= 300
    assert region.bottom <= 200


def test_history_change_resets_adjustments_and_crop(session):
    session.set_adjustments(AdjustmentState(brightness=30))
    session.apply_adjustments()
    assert len(session.history) == 2
    assert session.adjustments.is_neutral

    session.start_crop(DISPLAY)
    session.set_aspect_lock(AspectLock(1, 1))
    session.set_adjustments(AdjustmentState(contrast=10))
    session.undo()
    assert not session.region_editor.is_cropping
    assert session.adjustments.is_neutral


def test_neutral_adjustments_are_rejected(session):
    with pytest.raises(ValueError):
        session.apply_adjustments(AdjustmentState())
    assert len(session.history) == 1


def test_pending_transform_blocks_competing_operations(session):
    release = asyncio.Event()

    async def slow_transform(artifact, operation, params):
        await release.wait()
        return ArtifactVersion(payload=artifact.payload, media_type="image/png", annotation=operation)

    session.backend = Mock(transform=slow_transform)

    async def run():
        task = asyncio.create_task(session.apply_transform("apply_style", {"style": "Anime"}))
        await asyncio.sleep(0)
        assert session.pending == "apply_style"
        with pytest.raises(OperationPending):
            session.undo()
        with pytest.raises(OperationPending):
            session.start_crop(DISPLAY)
        with pytest.raises(OperationPending):
            await session.apply_transform("pixelate", {})
        release.set()
        return await task

    version = asyncio.run(run())
    assert session.pending is None
    assert session.current is version
    assert len(session.history) == 2


def test_failed_transform_keeps_current_version(session):
    original = session.current

    async def broken(artifact, operation, params):
        raise RuntimeError("model unavailable")

    session.backend = Mock(transform=broken)
    with pytest.raises(TransformFailed):
        asyncio.run(session.apply_transform("replace_sky", {}))
    assert session.current is original
    assert session.pending is None


def test_mock_transform_appends_version(session):
    version = asyncio.run(session.apply_transform("pixelate", {"block": 16}))
    assert version.annotation == "pixelate (block=16)"
    assert session.history.cursor == 1


def test_load_discards_previous_versions(session, make_png):
    asyncio.run(session.apply_transform("magic_erase", {}))
    fresh = ArtifactVersion(payload=make_png(50, 40), media_type="image/png")
    session.load(fresh)
    assert session.history.versions == (fresh,)
