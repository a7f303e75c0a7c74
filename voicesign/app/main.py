"""FastAPI application for the VoiceSign server."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from sqlmodel import SQLModel

from voicesign import __version__
from voicesign.database.exceptions import NotFoundError
from voicesign.database.session import engine
from voicesign.domain_service import EnrollmentError, SigningError
from voicesign.gateways.exceptions import GatewayError

from .exception_handlers import (
    enrollment_exception_handler,
    gateway_exception_handler,
    not_found_exception_handler,
    signing_exception_handler,
)
from .settings import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:     %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Initializes database tables on startup and optionally preloads the
    Whisper model.
    """
    SQLModel.metadata.create_all(engine)
    if settings.preload_whisper:
        from voicesign.gateways.transcription import load_whisper_model

        load_whisper_model()
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="VoiceSign Server",
        description="Voice enrollment, verification and voice-signature signing",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_exception_handler(NotFoundError, not_found_exception_handler)
    app.add_exception_handler(SigningError, signing_exception_handler)
    app.add_exception_handler(EnrollmentError, enrollment_exception_handler)
    app.add_exception_handler(GatewayError, gateway_exception_handler)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Check server health status."""
        return {"status": "healthy", "version": __version__}

    from .routers.debug import router as debug_router
    from .routers.enrollment import router as enrollment_router
    from .routers.signing import router as signing_router
    from .routers.transcription import router as transcription_router
    from .routers.verification import router as verification_router

    app.include_router(enrollment_router)
    app.include_router(verification_router)
    app.include_router(transcription_router)
    app.include_router(signing_router)
    app.include_router(debug_router)

    return app


def run_server() -> None:
    """Run the server using uvicorn."""
    uvicorn.run(
        "voicesign.app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


# Application instance for ASGI servers
app = create_app()
