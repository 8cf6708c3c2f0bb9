"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from vallox_gateway import __version__
from vallox_gateway.api.dependencies import app_state
from vallox_gateway.api.routes import router as api_router
from vallox_gateway.core.cache import RegisterCache
from vallox_gateway.core.config import SessionConfig, Settings, setup_logging
from vallox_gateway.core.models import HealthResponse
from vallox_gateway.protocol.session import BusSession, open_session
from vallox_gateway.serial.connection import SerialConnection

logger = logging.getLogger(__name__)


async def consume_events(session: BusSession, cache: RegisterCache) -> None:
    """Copy every event from the session into the cache until the session stops."""
    while session.running or not session.events.empty():
        try:
            event = await asyncio.wait_for(session.events.get(), timeout=1.0)
        except TimeoutError:
            continue
        await cache.set(event)
    logger.warning("Bus session stopped, no further updates")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    settings = app_state.settings or Settings()
    app_state.settings = settings

    setup_logging(settings.log_level)
    logger.info(f"Starting Vallox Gateway v{__version__}")

    app_state.cache = RegisterCache()
    app_state.connection = SerialConnection(port=settings.serial_port, baudrate=settings.serial_baud)
    await app_state.connection.connect()

    app_state.session = await open_session(SessionConfig.from_settings(settings, app_state.connection))
    app_state.consumer = asyncio.create_task(consume_events(app_state.session, app_state.cache))

    yield

    logger.info("Shutting down...")
    await app_state.session.close()
    app_state.consumer.cancel()
    try:
        await app_state.consumer
    except asyncio.CancelledError:
        pass


app = FastAPI(
    title="Vallox Gateway",
    description="Local REST API for Vallox ventilation units on the RS-485 bus",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Vallox Gateway",
        "version": __version__,
        "status": "running",
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    session = app_state.session
    cache = app_state.cache

    if session is None or cache is None:
        return HealthResponse(status="unhealthy", bus_running=False, registers_count=0)

    running = session.running
    status = "healthy" if running and cache.count > 0 else ("degraded" if running else "unhealthy")

    return HealthResponse(
        status=status,
        bus_running=running,
        registers_count=cache.count,
        last_update=cache.last_update,
        stats=session.stats,
    )


def main():
    """Run the application (for CLI entry point)."""
    import uvicorn

    settings = Settings()
    setup_logging(settings.log_level)
    app_state.settings = settings

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
