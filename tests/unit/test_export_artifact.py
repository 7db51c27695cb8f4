from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from src.application.use_cases.export_artifact import ExportArtifactUseCase
from src.domain.entities.adjustments import AdjustmentState
from src.domain.entities.artifact import ArtifactVersion
from src.domain.errors import SourceDecodeError
from src.domain.services.processing_service import ProcessingService
from src.infrastructure.codec.pillow_codec import PillowRasterCodec


@pytest.fixture()
def uc():
    return ExportArtifactUseCase(PillowRasterCodec(), ProcessingService())


def size_of(payload: bytes) -> tuple[int, int]:
    with Image.open(BytesIO(payload)) as img:
        return img.size


def test_original_without_adjustments_returns_stored_bytes(uc, png_bytes):
    artifact = ArtifactVersion(payload=png_bytes, media_type="image/png")
    assert uc.execute(artifact) is png_bytes
    assert uc.execute(artifact, "original", AdjustmentState()) is png_bytes


@pytest.mark.parametrize(
    "resolution, expected",
    [("1080p", (1440, 1080)), ("720p", (960, 720)), ("480p", (640, 480))],
)
def test_presets_resample_to_height_keeping_aspect(uc, png_bytes, resolution, expected):
    artifact = ArtifactVersion(payload=png_bytes, media_type="image/png")  # 800x600
    assert size_of(uc.execute(artifact, resolution)) == expected


def test_odd_aspect_width_is_rounded(uc, make_png):
    artifact = ArtifactVersion(payload=make_png(1000, 333), media_type="image/png")
    assert size_of(uc.execute(artifact, "480p")) == (1441, 480)


def test_live_adjustments_are_drawn_into_export(uc, make_png):
    artifact = ArtifactVersion(payload=make_png(40, 30), media_type="image/png")
    out = uc.execute(artifact, "original", AdjustmentState(filter="invert"))
    with Image.open(BytesIO(artifact.payload)) as src, Image.open(BytesIO(out)) as dst:
        before = np.asarray(src.convert("RGB")).astype(int)
        after = np.asarray(dst.convert("RGB")).astype(int)
    assert np.abs(after - (255 - before)).max() <= 1


def test_unknown_resolution_is_rejected(uc, png_bytes):
    with pytest.raises(ValueError):
        uc.execute(ArtifactVersion(payload=png_bytes, media_type="image/png"), "4k")


def test_undecodable_source_raises(uc):
    with pytest.raises(SourceDecodeError):
        uc.execute(ArtifactVersion(payload=b"junk", media_type="image/png"), "720p")
