from __future__ import annotations

import logging

from src.application.jobs.poller import JobPoller, PollHandle
from src.application.sessions.base import ExclusiveSession
from src.application.use_cases.apply_transform import ApplyTransformUseCase
from src.domain.entities.artifact import ArtifactVersion
from src.domain.errors import JobNotFound
from src.domain.services.edit_history import EditHistory
from src.infrastructure.backend.mock_backend import MockGenerationBackend

logger = logging.getLogger(__name__)

ImageSet = tuple[ArtifactVersion, ...]


class GeneratorSession(ExclusiveSession):
    """Image generator panel: each history entry is a whole generated image set.

    Long-running jobs are polled through ``JobPoller``; a finished job pushes a
    single-image set unless its handle was cancelled first.
    """

    MAX_PROMPTS = 20
    MAX_FINISHED_JOBS = 20

    def __init__(self, session_id: str, backend: MockGenerationBackend, poller: JobPoller) -> None:
        super().__init__()
        self.id = session_id
        self.backend = backend
        self.poller = poller
        self.history: EditHistory[ImageSet] = EditHistory()
        self.prompts: list[str] = []  # most recent first
        self.jobs: dict[str, PollHandle] = {}

    @property
    def current(self) -> ImageSet:
        return () if self.history.is_empty else self.history.current()

    async def generate(self, prompt: str, count: int = 1, aspect_ratio: str = "1:1") -> ImageSet:
        with self._exclusive("generate"):
            uc: ApplyTransformUseCase[ImageSet] = ApplyTransformUseCase(self.history)
            images = await uc.record(
                lambda: self.backend.generate_images(prompt, count, aspect_ratio)
            )
        self._remember(prompt)
        logger.info("Generator %s produced %d image(s)", self.id, len(images))
        return images

    async def outpaint(self, index: int, direction: str) -> ImageSet:
        with self._exclusive("outpaint"):
            current = self.history.current()
            if not 0 <= index < len(current):
                raise ValueError(f"No image at index {index}")

            async def _extend(images: ImageSet) -> ImageSet:
                extended = await self.backend.outpaint(images[index], direction)
                return images[:index] + (extended,) + images[index + 1 :]

            uc: ApplyTransformUseCase[ImageSet] = ApplyTransformUseCase(self.history)
            return await uc.execute(_extend)

    def undo(self) -> ImageSet | None:
        self._require_idle()
        return self.history.undo()

    def redo(self) -> ImageSet | None:
        self._require_idle()
        return self.history.redo()

    def start_job(self, prompt: str, aspect_ratio: str = "16:9") -> PollHandle:
        job_id = self.backend.submit_job(prompt, aspect_ratio)
        handle = self.poller.start(
            job_id,
            on_result=lambda version: self._on_job_result(job_id, version),
            on_error=lambda exc: self._on_job_error(job_id, exc),
        )
        self.jobs[job_id] = handle
        self._prune_jobs()
        self._remember(prompt)
        return handle

    def cancel_job(self, job_id: str) -> bool:
        handle = self.jobs.get(job_id)
        if handle is None:
            raise JobNotFound(f"Unknown job {job_id}")
        cancelled = handle.cancel()
        if cancelled:
            self.backend.discard_job(job_id)
        return cancelled

    def close(self) -> None:
        """Stop every running job; their late results are dropped."""
        for job_id in list(self.jobs):
            self.cancel_job(job_id)
        self.jobs.clear()

    def _on_job_result(self, job_id: str, version: ArtifactVersion) -> None:
        self.history.push((version,))
        logger.info("Generator %s recorded result of job %s", self.id, job_id)

    def _on_job_error(self, job_id: str, exc: Exception) -> None:
        self.backend.discard_job(job_id)
        logger.warning("Job %s failed: %s", job_id, exc)

    # finished handles are kept for reporting, newest MAX_FINISHED_JOBS only
    def _prune_jobs(self) -> None:
        finished = [job_id for job_id, handle in self.jobs.items() if not handle.is_active]
        for job_id in finished[: max(0, len(finished) - self.MAX_FINISHED_JOBS)]:
            del self.jobs[job_id]

    def _remember(self, prompt: str) -> None:
        if prompt in self.prompts:
            self.prompts.remove(prompt)
        self.prompts.insert(0, prompt)
        del self.prompts[self.MAX_PROMPTS :]


class TemplateSession(ExclusiveSession):
    """Template generator panel: history of single generated templates."""

    def __init__(self, session_id: str, backend: MockGenerationBackend) -> None:
        super().__init__()
        self.id = session_id
        self.backend = backend
        self.history: EditHistory[ArtifactVersion] = EditHistory()

    @property
    def current(self) -> ArtifactVersion | None:
        return None if self.history.is_empty else self.history.current()

    async def generate(self, prompt: str, template_type: str) -> ArtifactVersion:
        with self._exclusive("template"):
            uc: ApplyTransformUseCase[ArtifactVersion] = ApplyTransformUseCase(self.history)
            return await uc.record(lambda: self.backend.generate_template(prompt, template_type))

    def undo(self) -> ArtifactVersion | None:
        self._require_idle()
        return self.history.undo()

    def redo(self) -> ArtifactVersion | None:
        self._require_idle()
        return self.history.redo()
