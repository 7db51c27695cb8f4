from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from src.application.use_cases.commit_crop import CommitCropUseCase
from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.region import Bounds, Rect
from src.domain.errors import SourceDecodeError, SourceRegionEmptyError
from src.domain.services.edit_history import EditHistory
from src.infrastructure.codec.pillow_codec import PillowRasterCodec


def encode(arr: np.ndarray, fmt: str) -> bytes:
    buf = BytesIO()
    Image.fromarray(arr).save(buf, format=fmt)
    return buf.getvalue()


def seeded(artifact: ArtifactVersion) -> EditHistory[ArtifactVersion]:
    history: EditHistory[ArtifactVersion] = EditHistory()
    history.seed(artifact)
    return history


def test_region_is_scaled_to_native_resolution(png_bytes):
    source = ArtifactVersion(payload=png_bytes, media_type="image/png")
    history = seeded(source)
    uc = CommitCropUseCase(PillowRasterCodec(), history)

    # 800x600 source shown at 400x300
    version = uc.commit(Rect(40, 30, 320, 240), Bounds(0, 0, 400, 300))

    assert history.current() is version
    assert history.versions[0] is source
    assert version.media_type == "image/png"
    assert version.annotation == "cropped image"
    with Image.open(BytesIO(version.payload)) as img:
        assert img.size == (640, 480)
        assert img.format == "PNG"
        # first column of the crop is source column 80 of the ramp
        original = Image.open(BytesIO(png_bytes))
        assert img.getpixel((0, 0)) == original.getpixel((80, 60))


def test_media_type_is_preserved_for_jpeg():
    arr = np.full((60, 80, 3), 100, dtype=np.uint8)
    source = ArtifactVersion(payload=encode(arr, "JPEG"), media_type="image/jpeg")
    history = seeded(source)
    version = CommitCropUseCase(PillowRasterCodec(), history).execute(Rect(0, 0, 40, 30), 80, 60)
    with Image.open(BytesIO(version.payload)) as img:
        assert img.format == "JPEG"
        assert img.size == (40, 30)


def test_alpha_survives_png_crop(make_png):
    source = ArtifactVersion(payload=make_png(100, 100, "RGBA"), media_type="image/png")
    version = CommitCropUseCase(PillowRasterCodec(), seeded(source)).execute(
        Rect(10, 10, 50, 50), 100, 100
    )
    with Image.open(BytesIO(version.payload)) as img:
        assert img.mode == "RGBA"


def test_undecodable_source_leaves_history_unchanged():
    broken = ArtifactVersion(payload=b"not an image", media_type="image/png")
    history = seeded(broken)
    with pytest.raises(SourceDecodeError):
        CommitCropUseCase(PillowRasterCodec(), history).execute(Rect(0, 0, 10, 10), 100, 100)
    assert len(history) == 1


def test_region_mapping_to_no_pixels_is_rejected(png_bytes):
    history = seeded(ArtifactVersion(payload=png_bytes, media_type="image/png"))
    uc = CommitCropUseCase(PillowRasterCodec(), history)
    # 0.1 display units at scale 2 rounds to zero source pixels
    with pytest.raises(SourceRegionEmptyError):
        uc.execute(Rect(100, 100, 0.1, 50), 400, 300)
    assert len(history) == 1
