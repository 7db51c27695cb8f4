import numpy as np
import pytest

from src.application.use_cases.load_artifact import LoadArtifactUseCase, PayloadTooLarge
from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.region import PixelRect
from src.domain.errors import SourceDecodeError
from src.infrastructure.codec.pillow_codec import PillowRasterCodec


def test_describe_reports_size_and_type(png_bytes):
    info = PillowRasterCodec().describe(png_bytes)
    assert (info.width, info.height, info.media_type) == (800, 600, "image/png")


def test_describe_rejects_garbage():
    with pytest.raises(SourceDecodeError):
        PillowRasterCodec().describe(b"\x00\x01garbage")


def test_decode_normalizes_to_unit_floats(png_bytes):
    arr = PillowRasterCodec().decode(ArtifactVersion(payload=png_bytes, media_type="image/png"))
    assert arr.dtype == np.float32
    assert arr.shape == (600, 800, 3)
    assert arr.min() >= 0.0 and arr.max() <= 1.0


def test_encode_region_extracts_pixels():
    codec = PillowRasterCodec()
    buf = np.zeros((10, 10, 3), dtype=np.float32)
    buf[2:5, 3:7] = 1.0
    payload = codec.encode_region(buf, PixelRect(3, 2, 4, 3), "image/png")
    out = codec.decode(ArtifactVersion(payload=payload, media_type="image/png"))
    assert out.shape == (3, 4, 3)
    assert np.allclose(out, 1.0)


def test_jpeg_encoding_drops_alpha():
    codec = PillowRasterCodec()
    rgba = np.ones((4, 4, 4), dtype=np.float32)
    out = codec.decode(ArtifactVersion(payload=codec.encode(rgba, "image/jpeg"), media_type="image/jpeg"))
    assert out.shape == (4, 4, 3)


def test_encode_rejects_unknown_media_type():
    with pytest.raises(ValueError):
        PillowRasterCodec().encode(np.zeros((2, 2, 3), dtype=np.float32), "image/x-raw")


def test_load_artifact_uses_decoded_type(png_bytes):
    artifact = LoadArtifactUseCase(PillowRasterCodec(), max_bytes=10_000_000).execute(png_bytes, "photo.bin")
    assert artifact.media_type == "image/png"
    assert artifact.annotation == "photo.bin"


def test_load_artifact_enforces_size_limit(png_bytes):
    with pytest.raises(PayloadTooLarge):
        LoadArtifactUseCase(PillowRasterCodec(), max_bytes=100).execute(png_bytes)
