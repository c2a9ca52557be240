import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from immersion.application.api.v1.errors import map_immersion_error
from immersion.application.api.v1.routes import conventions, health, links
from immersion.application.di import create_container
from immersion.config import Config, configure_logging
from immersion.domain.shared.authorization.startup import validate_all_handlers
from immersion.domain.shared.error import ImmersionError
from immersion.infrastructure.event.relay import EventRelay
from immersion.infrastructure.persistence.migrate import run_migrations
from immersion.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container
    config = await container.get(Config)

    relay: EventRelay | None = None
    if config.events.enabled:
        relay = await container.get(EventRelay)
        relay.start()

    yield

    if relay is not None:
        await relay.stop()
    await container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    # Every handler must declare its authorization gate (fail fast)
    validate_all_handlers()

    if config.database.auto_migrate:
        run_migrations(config.database.url)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Automatic tracing of HTTP requests
    logfire.instrument_fastapi(app_instance)

    container = create_container(config)
    setup_dishka(container, app_instance)

    app_instance.include_router(health.router, prefix="/api/v1")
    app_instance.include_router(conventions.router, prefix="/api/v1")
    app_instance.include_router(links.router, prefix="/api/v1")

    @app_instance.exception_handler(ImmersionError)
    async def immersion_error_handler(request: Request, exc: ImmersionError):
        http_exc = map_immersion_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    return app_instance
