from __future__ import annotations

import asyncio
import hashlib
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np

from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.job import JobStatus
from src.domain.errors import JobNotFound
from src.domain.services.processing_service import ProcessingService
from src.infrastructure.codec.pillow_codec import PillowRasterCodec

logger = logging.getLogger(__name__)

# output sizes for generated images per aspect ratio
_GENERATED_SIZES = {
    "1:1": (256, 256),
    "16:9": (320, 180),
    "9:16": (180, 320),
}
# upscale factors offered by the generator panel
UPSCALE_FACTORS = (2, 4)
MAX_PIXEL_BLOCK = 64


@dataclass
class _MockJob:
    prompt: str
    aspect_ratio: str
    polls: int = 0


class MockGenerationBackend:
    """Deterministic stand-in for the generative AI service.

    Every "AI" result is a NumPy operation on the input or a gradient seeded
    from the prompt, so the same request always yields the same pixels.
    """

    def __init__(
        self,
        codec: PillowRasterCodec,
        processing: ProcessingService,
        job_ticks: int = 3,
        latency: float = 0.0,
    ) -> None:
        self.codec = codec
        self.processing = processing
        self.job_ticks = job_ticks
        self.latency = latency
        self._jobs: dict[str, _MockJob] = {}
        self._transforms: dict[str, Callable[[np.ndarray, dict[str, Any]], np.ndarray]] = {
            "remove_background": self._remove_background,
            "replace_sky": self._replace_sky,
            "add_object": self._add_object,
            "apply_style": self._apply_style,
            "magic_erase": self._magic_erase,
            "upscale": self._upscale,
            "pixelate": self._pixelate,
        }

    @property
    def transform_names(self) -> tuple[str, ...]:
        return tuple(self._transforms)

    def validate_params(self, operation: str, params: dict[str, Any]) -> None:
        """Reject unknown transforms and parameters outside their offered range.

        Raises:
            ValueError: If the operation or one of its parameters is not accepted
        """
        if operation not in self._transforms:
            raise ValueError(f"Unsupported transform: {operation}")
        if operation == "upscale":
            scale = params.get("scale", 2)
            if isinstance(scale, bool) or scale not in UPSCALE_FACTORS:
                raise ValueError(f"scale must be one of {', '.join(map(str, UPSCALE_FACTORS))}")
        elif operation == "pixelate":
            block = params.get("block", 8)
            if isinstance(block, bool) or not isinstance(block, int) or not 1 <= block <= MAX_PIXEL_BLOCK:
                raise ValueError(f"block must be an integer between 1 and {MAX_PIXEL_BLOCK}")

    async def transform(
        self, artifact: ArtifactVersion, operation: str, params: dict[str, Any]
    ) -> ArtifactVersion:
        self.validate_params(operation, params)
        fn = self._transforms[operation]
        await self._simulate_latency()
        with self.codec.open_source(artifact) as buffer:
            out = fn(buffer, params)
        # transparency needs a format that keeps alpha
        media_type = "image/png" if out.ndim == 3 and out.shape[2] == 4 else artifact.media_type
        return ArtifactVersion(
            payload=self.codec.encode(out, media_type),
            media_type=media_type,
            annotation=_describe(operation, params),
        )

    async def generate_images(
        self, prompt: str, count: int, aspect_ratio: str = "1:1"
    ) -> tuple[ArtifactVersion, ...]:
        await self._simulate_latency()
        width, height = _GENERATED_SIZES.get(aspect_ratio, _GENERATED_SIZES["1:1"])
        return tuple(
            ArtifactVersion(
                payload=self.codec.encode(_render(f"{prompt}#{i}", width, height), "image/png"),
                media_type="image/png",
                annotation=prompt,
            )
            for i in range(count)
        )

    async def outpaint(self, artifact: ArtifactVersion, direction: str) -> ArtifactVersion:
        await self._simulate_latency()
        with self.codec.open_source(artifact) as buffer:
            h, w = buffer.shape[:2]
            pads = {
                "left": ((0, 0), (w // 2, 0)),
                "right": ((0, 0), (0, w // 2)),
                "top": ((h // 2, 0), (0, 0)),
                "bottom": ((0, h // 2), (0, 0)),
            }
            if direction not in pads:
                raise ValueError(f"Unsupported outpaint direction: {direction}")
            pad = list(pads[direction]) + [(0, 0)] * (buffer.ndim - 2)
            extended = np.pad(buffer, pad, mode="edge")
        texture = _render(direction, extended.shape[1], extended.shape[0])
        out = self.processing.merge_images(extended, texture, 0.15)
        return ArtifactVersion(
            payload=self.codec.encode(out, artifact.media_type),
            media_type=artifact.media_type,
            annotation=f"outpainted {direction}",
        )

    async def generate_template(self, prompt: str, template_type: str) -> ArtifactVersion:
        await self._simulate_latency()
        sizes = {"story": (180, 320), "banner": (320, 120), "post": (256, 256)}
        width, height = sizes.get(template_type, (256, 256))
        out = _render(f"{template_type}:{prompt}", width, height)
        # header band
        out[: height // 6] = self.processing.adjust_brightness(out[: height // 6], -0.3)
        return ArtifactVersion(
            payload=self.codec.encode(out, "image/png"),
            media_type="image/png",
            annotation=f"{template_type}: {prompt}",
        )

    def submit_job(self, prompt: str, aspect_ratio: str = "16:9") -> str:
        job_id = uuid.uuid4().hex
        self._jobs[job_id] = _MockJob(prompt=prompt, aspect_ratio=aspect_ratio)
        logger.info("Submitted mock job %s", job_id)
        return job_id

    def discard_job(self, job_id: str) -> bool:
        """Forget a job nobody will poll again. Returns False for unknown ids."""
        if self._jobs.pop(job_id, None) is None:
            return False
        logger.info("Discarded mock job %s", job_id)
        return True

    async def get_job_status(self, job_id: str) -> JobStatus:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(f"Unknown job {job_id}")
        await self._simulate_latency()
        job.polls += 1
        if job.polls < self.job_ticks:
            return JobStatus(job_id=job_id, done=False)
        results = await self.generate_images(job.prompt, 1, job.aspect_ratio)
        self._jobs.pop(job_id, None)
        return JobStatus(job_id=job_id, done=True, result=results[0])

    # --------- transforms ---------
    def _remove_background(self, buf: np.ndarray, params: dict[str, Any]) -> np.ndarray:
        lum = self.processing.grayscale_luminosity(buf)
        border = np.concatenate([lum[0], lum[-1], lum[:, 0], lum[:, -1]])
        distance = np.abs(lum - float(np.median(border)))
        alpha = self.processing.binarize(distance, float(params.get("tolerance", 0.1)))
        return self.processing.with_alpha(buf, alpha)

    def _replace_sky(self, buf: np.ndarray, params: dict[str, Any]) -> np.ndarray:
        out = buf.copy()
        h, w = buf.shape[:2]
        horizon = max(1, h // 3)
        sky = _render(f"sky:{params.get('sky', 'Blue Sky')}", w, horizon)
        out[:horizon] = self.processing.merge_images(out[:horizon], sky, 0.7)
        return out

    def _add_object(self, buf: np.ndarray, params: dict[str, Any]) -> np.ndarray:
        out = buf.copy()
        h, w = buf.shape[:2]
        y0, y1, x0, x1 = h // 3, h - h // 3, w // 3, w - w // 3
        if y1 <= y0 or x1 <= x0:
            return out
        patch = _render(f"object:{params.get('prompt', '')}", x1 - x0, y1 - y0)
        out[y0:y1, x0:x1] = self.processing.merge_images(out[y0:y1, x0:x1], patch, 0.85)
        return out

    def _apply_style(self, buf: np.ndarray, params: dict[str, Any]) -> np.ndarray:
        style = str(params.get("style", ""))
        h, w = buf.shape[:2]
        base = self.processing.sepia(buf) if style.lower() == "vintage" else buf
        return self.processing.merge_images(base, _render(f"style:{style}", w, h), 0.35)

    def _magic_erase(self, buf: np.ndarray, params: dict[str, Any]) -> np.ndarray:
        out = buf.copy()
        h, w = buf.shape[:2]
        y0, y1, x0, x1 = h // 4, h - h // 4, w // 4, w - w // 4
        out[y0:y1, x0:x1] = self.processing.box_blur(buf, 4)[y0:y1, x0:x1]
        return out

    def _upscale(self, buf: np.ndarray, params: dict[str, Any]) -> np.ndarray:
        return self.processing.enlarge(buf, int(params.get("scale", 2)))

    def _pixelate(self, buf: np.ndarray, params: dict[str, Any]) -> np.ndarray:
        return self.processing.pixelate(buf, int(params.get("block", 8)))

    async def _simulate_latency(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)


# --------- helpers ---------
def _render(seed_text: str, width: int, height: int) -> np.ndarray:
    """Vertical two-color gradient with light noise, seeded from ``seed_text``."""
    seed = int.from_bytes(hashlib.sha256(seed_text.encode("utf-8")).digest()[:8], "big")
    rng = np.random.default_rng(seed)
    top, bottom = rng.random(3, dtype=np.float32), rng.random(3, dtype=np.float32)
    t = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, None, None]
    gradient = (1.0 - t) * top + t * bottom
    out = np.broadcast_to(gradient, (height, width, 3)).copy()
    out += rng.normal(0.0, 0.02, size=out.shape).astype(np.float32)
    return np.clip(out, 0.0, 1.0).astype(np.float32)


def _describe(operation: str, params: dict[str, Any]) -> str:
    detail = ", ".join(f"{k}={v}" for k, v in sorted(params.items()))
    return f"{operation} ({detail})" if detail else operation
