import asyncio
from unittest.mock import Mock

import pytest

from src.application.jobs.poller import JobPoller
from src.domain.entities.artifact import ArtifactVersion
from src.domain.entities.job import JobStatus
from src.domain.errors import TransformFailed

RESULT = ArtifactVersion(payload=b"frame", media_type="image/png")


def scripted(statuses):
    """fetch_status returning the given statuses in order."""
    calls = []

    async def fetch(job_id):
        calls.append(job_id)
        return statuses[min(len(calls), len(statuses)) - 1]

    return fetch, calls


def test_resolves_after_job_finishes():
    fetch, calls = scripted(
        [JobStatus("j1", False), JobStatus("j1", False), JobStatus("j1", True, result=RESULT)]
    )
    on_result = Mock()

    async def run():
        handle = JobPoller(fetch, interval=0.001).start("j1", on_result)
        return handle, await handle.wait()

    handle, result = asyncio.run(run())
    assert result is RESULT
    assert handle.attempts == 3
    assert len(calls) == 3
    on_result.assert_called_once_with(RESULT)
    assert not handle.is_active


def test_cancel_stops_future_polls():
    fetch, calls = scripted([JobStatus("j1", False)])
    on_result = Mock()

    async def run():
        handle = JobPoller(fetch, interval=0.01).start("j1", on_result)
        await asyncio.sleep(0.035)
        assert handle.cancel()
        polled = len(calls)
        await asyncio.sleep(0.05)
        return handle, polled

    handle, polled = asyncio.run(run())
    assert len(calls) == polled
    assert handle.cancelled
    assert not handle.cancel()
    on_result.assert_not_called()


def test_late_response_after_cancel_is_dropped():
    release = None
    on_result = Mock()

    async def slow_fetch(job_id):
        await release.wait()
        return JobStatus(job_id, True, result=RESULT)

    async def run():
        nonlocal release
        release = asyncio.Event()
        handle = JobPoller(slow_fetch, interval=0.001).start("j1", on_result)
        await asyncio.sleep(0.01)  # request is in flight
        handle.cancel()
        release.set()
        await asyncio.sleep(0.01)
        return handle, await handle.wait()

    handle, result = asyncio.run(run())
    assert result is None
    assert handle.result is None
    on_result.assert_not_called()


def test_fetch_error_is_reported_as_transform_failure():
    on_error = Mock()

    async def failing(job_id):
        raise ConnectionError("backend down")

    async def run():
        handle = JobPoller(failing, interval=0.001).start("j1", Mock(), on_error)
        with pytest.raises(TransformFailed):
            await handle.wait()
        return handle

    handle = asyncio.run(run())
    assert isinstance(handle.error, TransformFailed)
    on_error.assert_called_once()


def test_gives_up_after_max_attempts():
    fetch, calls = scripted([JobStatus("j1", False)])

    async def run():
        handle = JobPoller(fetch, interval=0.001, max_attempts=4).start("j1", Mock())
        with pytest.raises(TransformFailed, match="timed out"):
            await handle.wait()

    asyncio.run(run())
    assert len(calls) == 4


def test_job_error_status_fails_handle():
    fetch, _ = scripted([JobStatus("j1", True, error="content policy")])

    async def run():
        handle = JobPoller(fetch, interval=0.001).start("j1", Mock())
        with pytest.raises(TransformFailed, match="content policy"):
            await handle.wait()

    asyncio.run(run())
