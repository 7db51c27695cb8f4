from __future__ import annotations

from functools import lru_cache

from src.domain.services.processing_service import ProcessingService
from src.infrastructure.backend.mock_backend import MockGenerationBackend
from src.infrastructure.codec.pillow_codec import PillowRasterCodec
from src.infrastructure.config import Settings, get_settings
from src.infrastructure.sessions.session_registry import SessionRegistry


def get_app_settings() -> Settings:
    return get_settings()


def get_processing_service() -> ProcessingService:
    return ProcessingService()


@lru_cache(maxsize=1)
def get_codec() -> PillowRasterCodec:
    return PillowRasterCodec()


@lru_cache(maxsize=1)
def get_backend() -> MockGenerationBackend:
    return MockGenerationBackend(
        get_codec(), get_processing_service(), job_ticks=get_settings().mock_job_ticks
    )


@lru_cache(maxsize=1)
def get_registry() -> SessionRegistry:
    return SessionRegistry(get_settings(), get_codec(), get_processing_service(), get_backend())
