# Main application entry point

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
import uvicorn

from json_connector.config.settings import get_settings
from json_connector.api.routes import router
from json_connector.common.errors import ConnectorError
from json_connector.common.logging_config import setup_logging
from json_connector.common.metrics import get_metrics, get_metrics_content_type
from json_connector.common.middleware import RequestTrackingMiddleware
from json_connector.storage.factory import get_cache_store, reset_cache_store

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup, release the cache store on shutdown."""
    setup_logging(settings.log_level, json_format=settings.log_json)
    logger.info(
        f"JSON connector starting with '{settings.cache_backend}' cache store")

    yield

    reset_cache_store()
    logger.info("JSON connector stopped")


app = FastAPI(
    title="JSON Connector API",
    description="Tabular schema and rows for arbitrary JSON sources",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(RequestTrackingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.exception_handler(ConnectorError)
async def connector_error_handler(request: Request, exc: ConnectorError):
    """Surface connector errors to the user as 400 with their message."""
    logger.warning(
        "Connector request failed",
        extra={"extra_fields": {"error_type": exc.error_type, "message": exc.message}},
    )
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "JSON Connector API",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint (alias for /live)"""
    return {"status": "healthy"}


@app.get("/live")
async def liveness():
    """Liveness check endpoint"""
    return {"status": "alive"}


@app.get("/ready")
def readiness():
    """Readiness check endpoint"""
    cache_healthy = get_cache_store().ping()

    return {
        "status": "ready" if cache_healthy else "not_ready",
        "checks": {
            "cache": "connected" if cache_healthy else "disconnected",
        },
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics"""
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


if __name__ == "__main__":
    uvicorn.run(
        "json_connector.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug
    )
