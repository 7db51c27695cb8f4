from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.job import JobStatus
from src.domain.errors import TransformFailed

logger = logging.getLogger(__name__)

ResultCallback = Callable[[ArtifactVersion], None]
ErrorCallback = Callable[[Exception], None]


class PollHandle:
    """Owned lifecycle of one poll loop.

    ``cancel()`` stops future polls and discards the in-flight request; a
    status that arrives after cancellation is dropped, never delivered.
    """

    def __init__(
        self, job_id: str, on_result: ResultCallback, on_error: ErrorCallback | None
    ) -> None:
        self.job_id = job_id
        self.attempts = 0
        self.result: ArtifactVersion | None = None
        self.error: Exception | None = None
        self._on_result = on_result
        self._on_error = on_error
        self._cancelled = False
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None
        self._finished = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    @property
    def is_active(self) -> bool:
        return not self._cancelled and not self.done

    def cancel(self) -> bool:
        if not self.is_active:
            return False
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
        # an in-flight request still finishes; _poll drops its status
        self._finished.set()
        logger.info("Cancelled polling for job %s after %d attempts", self.job_id, self.attempts)
        return True

    async def wait(self) -> ArtifactVersion | None:
        """Block until resolved, failed or cancelled. Returns None when cancelled."""
        await self._finished.wait()
        if self.error is not None:
            raise self.error
        return self.result

    def _resolve(self, result: ArtifactVersion) -> None:
        self.result = result
        self._finished.set()
        self._on_result(result)

    def _fail(self, exc: Exception) -> None:
        self.error = exc
        self._finished.set()
        if self._on_error is not None:
            self._on_error(exc)


class JobPoller:
    """Cancellable poll loop against the generation backend.

    Each tick either resolves, fails, or re-arms a timer for the next one.
    """

    def __init__(
        self,
        fetch_status: Callable[[str], Awaitable[JobStatus]],
        interval: float,
        max_attempts: int | None = None,
    ) -> None:
        self._fetch_status = fetch_status
        self.interval = interval
        self.max_attempts = max_attempts

    def start(
        self,
        job_id: str,
        on_result: ResultCallback,
        on_error: ErrorCallback | None = None,
    ) -> PollHandle:
        handle = PollHandle(job_id, on_result, on_error)
        self._arm(handle, 0.0)
        return handle

    def _arm(self, handle: PollHandle, delay: float) -> None:
        loop = asyncio.get_running_loop()
        handle._timer = loop.call_later(delay, self._tick, handle)

    def _tick(self, handle: PollHandle) -> None:
        if handle.cancelled:
            return
        handle._timer = None
        handle._task = asyncio.get_running_loop().create_task(self._poll(handle))

    async def _poll(self, handle: PollHandle) -> None:
        if handle.cancelled:
            return
        handle.attempts += 1
        try:
            status = await self._fetch_status(handle.job_id)
        except Exception as exc:
            if handle.cancelled:
                return
            logger.warning("Polling job %s failed: %s", handle.job_id, exc)
            handle._fail(TransformFailed(str(exc)))
            return

        if handle.cancelled:
            logger.info("Dropped late status for cancelled job %s", handle.job_id)
            return
        if status.done:
            if status.error or status.result is None:
                handle._fail(TransformFailed(status.error or "Job finished without a result"))
            else:
                handle._resolve(status.result)
        elif self.max_attempts is not None and handle.attempts >= self.max_attempts:
            handle._fail(TransformFailed(f"Job {handle.job_id} timed out"))
        else:
            self._arm(handle, self.interval)
