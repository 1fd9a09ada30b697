import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from . import __version__
from .api import hot_folder, shares
from .core.exceptions import ShareError
from .dependencies import (
    get_existing_hot_folder,
    get_hot_folder,
    get_settings,
    get_share_connection,
    reset_singletons,
)
from .logging_config import setup_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging(settings)
    logging.info("Share Agent starting up...")

    if settings.share_configured:
        try:
            connection = await asyncio.to_thread(get_share_connection)
            logging.info(f"Share ready: {connection.share_root}")
        except ShareError as e:
            # Endpoints reconnect on demand
            logging.warning(f"Initial share connect failed: {e}")
    else:
        logging.warning("No share configured - set SHARE_ADDRESS")

    if settings.hot_folder_enabled:
        try:
            service = await asyncio.to_thread(get_hot_folder)
            await service.start()
        except (ShareError, ValueError, ImportError) as e:
            logging.error(f"Hot folder could not start: {e}")

    yield

    # Shutdown
    logging.info("Share Agent shutting down...")

    service = get_existing_hot_folder()
    if service is not None:
        await service.stop()

    await asyncio.to_thread(reset_singletons)
    logging.info("Share connection closed")


# Create FastAPI application
app = FastAPI(
    title="Share Agent",
    description="Filoperationer på et SMB share og hot folder behandling",
    version=__version__,
    lifespan=lifespan,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logging.info(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "operation": "http_request",
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )

    response = await call_next(request)

    logging.info(
        f"Response: {response.status_code}",
        extra={
            "operation": "http_response",
            "status_code": response.status_code,
            "path": request.url.path,
        },
    )

    return response


# Include routers
app.include_router(shares.router)
app.include_router(hot_folder.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Share Agent er kørende"}


@app.get("/health")
async def health():
    """Detaljeret health check."""
    hot_folder_service = get_existing_hot_folder()
    return {
        "status": "healthy",
        "service": "share-agent",
        "share_configured": settings.share_configured,
        "hot_folder": hot_folder_service.get_status() if hot_folder_service else None,
    }


if __name__ == "__main__":
    uvicorn.run(
        "share_agent.main:app", host="0.0.0.0", port=8000, reload=False, log_level="info"
    )
