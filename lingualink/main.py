"""
Main FastAPI application for the LinguaLink video-calling and translation service.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import uuid

from lingualink.api import calls, messaging, services, users
from lingualink.config import settings
from lingualink.errors import LinguaLinkError
from lingualink.messaging.relay import MailboxRelay
from lingualink.models.database import close_database, create_engine, create_session_factory, init_database
from lingualink.stt import get_transcription_provider
from lingualink.stt.base import TranscriptionProvider
from lingualink.translation import get_translation_provider
from lingualink.translation.base import TranslationProvider
from lingualink.utils.logging import get_logger, request_id_var

logger = get_logger(__name__)


async def lingualink_error_handler(request: Request, exc: LinguaLinkError):
    if exc.status_code >= 500:
        logger.error("Request failed", error_type=type(exc).__name__, error_message=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Validation error", "errors": errors})


def create_app(
    database_url: Optional[str] = None,
    relay: Optional[MailboxRelay] = None,
    translator: Optional[TranslationProvider] = None,
    transcriber: Optional[TranscriptionProvider] = None,
) -> FastAPI:
    """Build the application; collaborators can be injected for tests."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting LinguaLink service...")

        engine = create_engine(database_url)
        await init_database(engine)
        app.state.session_factory = create_session_factory(engine)

        app.state.relay = relay if relay is not None else MailboxRelay()
        app.state.translator = translator if translator is not None else get_translation_provider()
        app.state.transcriber = transcriber if transcriber is not None else get_transcription_provider()
        await app.state.relay.start()

        logger.info("LinguaLink service started successfully")

        yield

        logger.info("Shutting down LinguaLink service...")
        await app.state.relay.stop()
        await app.state.translator.close()
        await app.state.transcriber.close()
        await close_database(engine)
        logger.info("LinguaLink service shut down")

    app = FastAPI(
        title="LinguaLink",
        description="Video calls with live translation and speech-to-text",
        version="1.0.0",
        lifespan=lifespan,
    )

    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add request ID to context for logging."""
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response

    app.add_exception_handler(LinguaLinkError, lingualink_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "online_users": len(request.app.state.relay),
            "environment": settings.environment.value,
        }

    app.include_router(messaging.router)
    app.include_router(users.router)
    app.include_router(calls.router)
    app.include_router(services.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lingualink.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
