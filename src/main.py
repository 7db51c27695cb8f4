from __future__ import annotations

import logging

from fastapi import FastAPI

from src.infrastructure.api.middlewares import add_default_middlewares
from src.infrastructure.api.routes.audio_routes import router as audio_router
from src.infrastructure.api.routes.crop_routes import router as crop_router
from src.infrastructure.api.routes.generator_routes import router as generator_router
from src.infrastructure.api.routes.history_routes import router as history_router
from src.infrastructure.api.routes.session_routes import router as session_router
from src.infrastructure.api.routes.template_routes import router as template_router
from src.infrastructure.config import get_settings


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(
        title="CanvasLab Backend",
        version="0.1.0",
        description="""
        ## CanvasLab Backend API

        FastAPI backend for a creative editing demo: a linear undo/redo edit
        history per artifact, an interactive crop tool driven by pointer
        events, and mock AI transforms implemented with NumPy and Pillow.

        ### Features
        - **Photo Sessions**: Upload an image and edit it; every edit appends a version
        - **Edit History**: Undo and redo across versions; new edits discard the redo branch
        - **Crop Tool**: Handle drags with aspect locking, clamped to the rendered image
        - **Adjustments and Transforms**: Color sliders, filters and deterministic mock AI operations
        - **Generators**: Image sets, outpainting, templates and polled long-running jobs
        - **Voice Effects**: Playback configurations for the audio panel

        ### State
        Sessions live in memory. There is no authentication and nothing is
        persisted across restarts.

        ### Error Responses
        - **400 Bad Request**: Invalid parameters or undecodable image
        - **404 Not Found**: Session or job does not exist
        - **409 Conflict**: Cropping inactive, drag already active or operation still running
        - **422 Unprocessable Entity**: Validation error or empty crop region
        - **502 Bad Gateway**: A transform failed; the history is unchanged
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    add_default_middlewares(app)

    @app.get(
        "/",
        summary="API Root",
        description="Get basic information about the CanvasLab API",
        response_description="API information including status and version",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "canvaslab-backend", "version": app.version}

    @app.get(
        "/health",
        summary="Health Check",
        description="Check if the API service is running and healthy",
        response_description="Health status of the API service",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy"}

    app.include_router(session_router)
    app.include_router(history_router)
    app.include_router(crop_router)
    app.include_router(generator_router)
    app.include_router(template_router)
    app.include_router(audio_router)
    return app


app = create_app()
