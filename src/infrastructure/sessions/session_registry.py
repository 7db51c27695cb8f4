from __future__ import annotations

import logging
import uuid

from src.application.jobs.poller import JobPoller
from src.application.sessions.generator_session import GeneratorSession, TemplateSession
from src.application.sessions.photo_session import PhotoEditorSession
from src.domain.entities.artifact import ArtifactVersion
from src.domain.errors import SessionNotFound
from src.domain.services.processing_service import ProcessingService
from src.infrastructure.backend.mock_backend import MockGenerationBackend
from src.infrastructure.codec.pillow_codec import PillowRasterCodec
from src.infrastructure.config import Settings

logger = logging.getLogger(__name__)


class SessionRegistry:
    """In-memory store of live editing sessions; nothing survives a restart."""

    def __init__(
        self,
        settings: Settings,
        codec: PillowRasterCodec,
        processing: ProcessingService,
        backend: MockGenerationBackend,
    ) -> None:
        self.settings = settings
        self.codec = codec
        self.processing = processing
        self.backend = backend
        self._photo: dict[str, PhotoEditorSession] = {}
        self._generator: dict[str, GeneratorSession] = {}
        self._template: dict[str, TemplateSession] = {}

    def create_photo(self, initial: ArtifactVersion) -> PhotoEditorSession:
        session = PhotoEditorSession(
            uuid.uuid4().hex,
            initial,
            self.codec,
            self.processing,
            self.backend,
            min_size=self.settings.crop_min_size,
            default_fraction=self.settings.crop_default_fraction,
        )
        self._photo[session.id] = session
        logger.info("Opened photo session %s", session.id)
        return session

    def get_photo(self, session_id: str) -> PhotoEditorSession:
        return self._lookup(self._photo, session_id)

    def delete_photo(self, session_id: str) -> None:
        session = self._lookup(self._photo, session_id)
        session.cancel_crop()
        del self._photo[session_id]
        logger.info("Closed photo session %s", session_id)

    def create_generator(self) -> GeneratorSession:
        poller = JobPoller(
            self.backend.get_job_status,
            interval=self.settings.job_poll_interval,
            max_attempts=self.settings.job_poll_max_attempts,
        )
        session = GeneratorSession(uuid.uuid4().hex, self.backend, poller)
        self._generator[session.id] = session
        logger.info("Opened generator session %s", session.id)
        return session

    def get_generator(self, session_id: str) -> GeneratorSession:
        return self._lookup(self._generator, session_id)

    def delete_generator(self, session_id: str) -> None:
        session = self._lookup(self._generator, session_id)
        session.close()
        del self._generator[session_id]
        logger.info("Closed generator session %s", session_id)

    def create_template(self) -> TemplateSession:
        session = TemplateSession(uuid.uuid4().hex, self.backend)
        self._template[session.id] = session
        logger.info("Opened template session %s", session.id)
        return session

    def get_template(self, session_id: str) -> TemplateSession:
        return self._lookup(self._template, session_id)

    def delete_template(self, session_id: str) -> None:
        self._lookup(self._template, session_id)
        del self._template[session_id]
        logger.info("Closed template session %s", session_id)

    @staticmethod
    def _lookup(store: dict, session_id: str):
        session = store.get(session_id)
        if session is None:
            raise SessionNotFound(f"Session {session_id} not found")
        return session
