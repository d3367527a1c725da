"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from llmsgen.api.routes import checkout, cleanup, generate, runs, success, webhooks
from llmsgen.config import Settings, get_settings
from llmsgen.database import build_engine, build_session_maker, create_tables
from llmsgen.errors import LlmsGenError
from llmsgen.log_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an explicit settings instance."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        engine = build_engine(settings.database_url, echo=settings.debug)
        app.state.engine = engine
        app.state.session_maker = build_session_maker(engine)
        if settings.create_tables:
            await create_tables(engine)
        yield
        # Shutdown
        await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        description="Generate llms.txt files from a short survey",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LlmsGenError)
    async def llmsgen_error_handler(request: Request, exc: LlmsGenError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc.__cause__)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception for {request.url}")
        return JSONResponse(status_code=500, content={"error": "An unexpected error occurred."})

    # Include routers
    app.include_router(generate.router, prefix="/api", tags=["generate"])
    app.include_router(runs.router, prefix="/api", tags=["runs"])
    app.include_router(checkout.router, prefix="/api", tags=["checkout"])
    app.include_router(webhooks.router, prefix="/api")
    app.include_router(cleanup.router, prefix="/api")
    app.include_router(cleanup.router, include_in_schema=False)
    app.include_router(success.router, tags=["runs"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": "1.0.0",
            "docs": "/docs",
        }

    return app


configure_logging()
app = create_app()
