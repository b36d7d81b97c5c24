"""
FastAPI application entry point for the slideplay viewer service.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from slideplay import __version__
from slideplay.api.websocket import router as websocket_router
from slideplay.infra.config.dependencies import shutdown_renderer
from slideplay.infra.config.logging_config import get_logger, setup_logging
from slideplay.infra.config.settings import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings=settings)
    logger = get_logger("app")
    logger.info(
        "app.startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )

    yield

    await shutdown_renderer()
    logger.info("app.shutdown", app_name=settings.app_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Slide playback, live editing and export core",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.include_router(websocket_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": __version__,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "slideplay.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info" if not settings.debug else "debug",
    )
