from __future__ import annotations

import logging
from dataclasses import dataclass

from src.domain.entities.artifact import ArtifactVersion
from src.infrastructure.codec.pillow_codec import PillowRasterCodec

logger = logging.getLogger(__name__)


class PayloadTooLarge(ValueError):
    pass


@dataclass
class LoadArtifactUseCase:
    codec: PillowRasterCodec
    max_bytes: int

    def execute(self, data: bytes, filename: str | None = None) -> ArtifactVersion:
        """
        Turn uploaded bytes into the first version of a timeline.

        Args:
            data: Raw file content
            filename: Original filename, kept as the version annotation

        Returns:
            ArtifactVersion typed with the decoded format's MIME type

        Raises:
            PayloadTooLarge: If the upload exceeds ``max_bytes``
            SourceDecodeError: If the bytes are not a readable raster
        """
        if len(data) > self.max_bytes:
            raise PayloadTooLarge(f"Upload of {len(data)} bytes exceeds {self.max_bytes}")
        info = self.codec.describe(data)
        logger.info("Loaded %dx%d %s upload", info.width, info.height, info.media_type)
        return ArtifactVersion(payload=data, media_type=info.media_type, annotation=filename)
