"""
HireOrbit - Main FastAPI application
"""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import structlog

from app.core.config import Settings, get_settings
from app.core.database import build_engine, build_session_factory, init_db
from app.core.logging_config import configure_logging
from app.core.mailer import Mailer
from app.core.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    ExceptionHandlerMiddleware,
    error_body,
)
from app.core.exceptions import HireOrbitException
from app.core.storage import ResumeStorage
from app.auth.google import GoogleTokenVerifier
from app.auth.router import router as auth_router
from app.users.router import router as users_router
from app.jobs.router import router as jobs_router, employer_router as employer_jobs_router
from app.saved_jobs.router import router as saved_jobs_router
from app.applications.router import (
    router as applications_router,
    employer_router as employer_applications_router,
)
from app.candidates.router import router as candidates_router
from app.dashboard.router import router as dashboard_router
from app.contact.router import router as contact_router

logger = structlog.get_logger()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API with its engine, mailer, storage and routers wired in"""
    settings = settings or get_settings()
    configure_logging(settings)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("application_starting", version=settings.APP_VERSION, environment=settings.ENVIRONMENT)
        init_db(engine)
        yield
        logger.info("application_shutting_down")
        engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Job board API for candidates and employers",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    storage = ResumeStorage(settings)
    storage.ensure_directory()

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.mailer = Mailer(settings)
    app.state.google_verifier = GoogleTokenVerifier(settings.GOOGLE_CLIENT_ID)
    app.state.storage = storage

    # Add middleware (last added runs first)
    app.add_middleware(ExceptionHandlerMiddleware, settings=settings)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HireOrbitException)
    async def hireorbit_exception_handler(request: Request, exc: HireOrbitException):
        """Handle HireOrbit exceptions"""
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies and parameters are client errors, reported as 400"""
        fields = [".".join(str(part) for part in err.get("loc", ()) if part != "body") for err in exc.errors()]
        logger.info("request_validation_failed", path=request.url.path, fields=fields)
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "message": "Validation failed",
                    "details": {"fields": fields},
                    "type": "ValidationError",
                }
            },
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": "/api/docs",
        }

    # Include routers
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(jobs_router)
    app.include_router(employer_jobs_router)
    app.include_router(saved_jobs_router)
    app.include_router(applications_router)
    app.include_router(employer_applications_router)
    app.include_router(candidates_router)
    app.include_router(dashboard_router)
    app.include_router(contact_router)

    # Uploaded résumés are served back from their public URL
    app.mount("/uploads", StaticFiles(directory=str(storage.root), check_dir=False), name="uploads")

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    # Build the app inside the server process: uvicorn app.main:create_app --factory
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
