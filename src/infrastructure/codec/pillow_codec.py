from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.region import PixelRect
from src.domain.errors import SourceDecodeError
from src.domain.services.processing_service import ProcessingService

_FORMATS = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/webp": "WEBP",
    "image/bmp": "BMP",
    "image/gif": "GIF",
    "image/tiff": "TIFF",
}
# formats without an alpha channel
_OPAQUE = {"JPEG", "BMP"}


@dataclass
class RasterInfo:
    width: int
    height: int
    media_type: str


class PillowRasterCodec:
    """Decode artifacts into float32 arrays in [0, 1] and encode arrays back to bytes.

    This is the canvas the commit pipeline draws on. Sources are opened with
    ``open_source`` so the decoded image is released as soon as the caller is
    done with it.
    """

    def describe(self, payload: bytes) -> RasterInfo:
        try:
            with Image.open(BytesIO(payload)) as img:
                img.verify()
                fmt = img.format
                width, height = img.size
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise SourceDecodeError(f"Unreadable image: {exc}") from exc
        return RasterInfo(width=width, height=height, media_type=Image.MIME.get(fmt, "image/png"))

    @contextmanager
    def open_source(self, artifact: ArtifactVersion) -> Iterator[np.ndarray]:
        try:
            img = Image.open(BytesIO(artifact.payload))
            img.load()
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise SourceDecodeError(f"Cannot decode {artifact.media_type} artifact: {exc}") from exc
        try:
            yield self._to_array(img)
        finally:
            img.close()

    def decode(self, artifact: ArtifactVersion) -> np.ndarray:
        with self.open_source(artifact) as buffer:
            return buffer

    def encode(self, array: np.ndarray, media_type: str) -> bytes:
        fmt = _FORMATS.get(media_type.lower())
        if fmt is None:
            raise ValueError(f"Unsupported media type: {media_type}")
        pixels = np.rint(np.clip(array, 0.0, 1.0) * 255.0).astype("uint8")
        if pixels.ndim == 3 and pixels.shape[2] == 4 and fmt in _OPAQUE:
            pixels = pixels[..., :3]
        img = Image.fromarray(np.ascontiguousarray(pixels))
        buf = BytesIO()
        if fmt == "JPEG":
            img.save(buf, format=fmt, quality=95)
        else:
            img.save(buf, format=fmt)
        return buf.getvalue()

    def resize(self, array: np.ndarray, width: int, height: int) -> np.ndarray:
        pixels = np.rint(np.clip(array, 0.0, 1.0) * 255.0).astype("uint8")
        img = Image.fromarray(np.ascontiguousarray(pixels))
        resized = img.resize((width, height), Image.Resampling.LANCZOS)
        return np.asarray(resized).astype(np.float32) / 255.0

    def encode_region(self, buffer: np.ndarray, rect: PixelRect, media_type: str) -> bytes:
        region = ProcessingService.crop(
            buffer, rect.x, rect.x + rect.width, rect.y, rect.y + rect.height
        )
        return self.encode(region, media_type)

    # --------- helpers ---------
    @staticmethod
    def _to_array(img: Image.Image) -> np.ndarray:
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        converted = img.convert("RGBA" if has_alpha else "RGB")
        return np.asarray(converted).astype(np.float32) / 255.0
