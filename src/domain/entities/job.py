from __future__ import annotations

from dataclasses import dataclass

from src.domain.entities.artifact import ArtifactVersion


@dataclass(frozen=True)
class JobStatus:
    """One status report for a long-running generation job."""

    job_id: str
    done: bool
    result: ArtifactVersion | None = None
    error: str | None = None
