#!/usr/bin/env python3
"""
Session Service - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Runs the API server

All business logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import redis.asyncio as redis
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from session_service import __version__
from session_service.logging_config import configure_logging, get_logging_config
from session_service.modules.api import (
    ErrorResponse,
    SessionIdResponse,
    SessionResponse,
    SessionType,
    to_responses,
)
from session_service.modules.config import get_config

# Import modules through their black box interfaces
from session_service.modules.session import (
    SessionInvalidError,
    SessionNotFoundError,
    SessionQueryInvalidError,
    SessionRepository,
)
from session_service.modules.storage import RedisDocumentStore, StorageModule

# Get configuration
config = get_config()

# Configure logging with health check suppression
configure_logging(config.get("log_level"))
logger = logging.getLogger("session_service.main")

# Module instances (initialized at startup)
storage_module: Optional[StorageModule] = None
document_store: Optional[RedisDocumentStore] = None
session_repository: Optional[SessionRepository] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle - initialize and cleanup resources.
    """
    global storage_module, document_store, session_repository

    # Startup
    logger.info("Starting Session Service API...")

    storage_module = StorageModule(config.redis_url, password=config.get("redis_password"))
    redis_client = await storage_module.connect()

    document_store = RedisDocumentStore(redis_client, key_prefix=config.get("store_key_prefix"))
    session_repository = SessionRepository(
        document_store, publish_events=config.get("publish_events")
    )

    logger.info(f"Session Service API started (store prefix '{config.get('store_key_prefix')}')")

    yield

    # Shutdown
    logger.info("Shutting down Session Service API...")
    await storage_module.disconnect()
    session_repository = None
    document_store = None
    logger.info("Session Service API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Session Service API",
    description="Store and query JSON sessions by source and type",
    version=__version__,
    lifespan=lifespan,
)


# Dependency injection helpers
async def get_session_repository() -> SessionRepository:
    """Get the initialized session repository."""
    if not session_repository:
        raise HTTPException(503, "Service not initialized")
    return session_repository


async def get_document_store() -> Optional[RedisDocumentStore]:
    return document_store


async def read_body(request: Request) -> Optional[bytes]:
    """Raw request body, or None when the request carries none."""
    body = await request.body()
    return body or None


# Session Endpoints


@app.post("/api/sessions/{source}/{session_type}/", response_model=SessionIdResponse)
async def add_session(
    source: str,
    session_type: SessionType,
    body: Optional[bytes] = Depends(read_body),
    repository: SessionRepository = Depends(get_session_repository),
):
    """
    Store a session, or return the id of an identical one.

    Returns:
        200: Session id
        400: Body missing or not a JSON object, unknown type
    """
    session = await repository.create(source, session_type.value, body)
    return SessionIdResponse(id=session.id)


@app.get("/api/sessions/{source}/{session_type}/", response_model=List[SessionResponse])
async def get_sessions(
    source: str,
    session_type: SessionType,
    repository: SessionRepository = Depends(get_session_repository),
):
    """
    List all sessions for a source and type.

    Returns:
        200: Sessions (possibly empty)
    """
    return to_responses(await repository.list_all(source, session_type.value))


@app.get("/api/sessions/{source}/{session_type}/query", response_model=List[SessionResponse])
async def get_sessions_by_query(
    source: str,
    session_type: SessionType,
    field: str = Query(..., description="Dotted field path, e.g. data.title"),
    value: str = Query(..., description="Value the field must equal"),
    repository: SessionRepository = Depends(get_session_repository),
):
    """
    Find sessions whose field equals a value.

    Returns:
        200: Matching sessions (possibly empty)
        400: Field path rejected
    """
    return to_responses(
        await repository.get_by_field(source, session_type.value, field, value)
    )


@app.post("/api/sessions/{source}/{session_type}/query/fetch", response_model=List[SessionResponse])
async def fetch_sessions_by_query(
    source: str,
    session_type: SessionType,
    body: Optional[bytes] = Depends(read_body),
    repository: SessionRepository = Depends(get_session_repository),
):
    """
    Find sessions matching a JSON filter document.

    Returns:
        200: Matching sessions (possibly empty)
        400: Filter is not a JSON object, or a key was rejected
    """
    return to_responses(
        await repository.fetch_by_query(source, session_type.value, body)
    )


@app.get("/api/sessions/{source}/{session_type}/{session_id}", response_model=SessionResponse)
async def get_session(
    source: str,
    session_type: SessionType,
    session_id: str,
    repository: SessionRepository = Depends(get_session_repository),
):
    """
    Get a single session.

    Returns:
        200: Session
        404: Session not found in this source and type
    """
    session = await repository.get_by_id(source, session_type.value, session_id)
    return SessionResponse.from_session(session)


@app.put("/api/sessions/{source}/{session_type}/{session_id}")
async def update_session(
    source: str,
    session_type: SessionType,
    session_id: str,
    body: Optional[bytes] = Depends(read_body),
    repository: SessionRepository = Depends(get_session_repository),
):
    """
    Replace the data of a session, keeping its id.

    Returns:
        200: Empty body
        400: Body missing or not a JSON object
        404: Session not found in this source and type
    """
    await repository.replace(source, session_type.value, session_id, body)
    return Response(status_code=200)


@app.delete("/api/sessions/{source}/{session_type}/{session_id}")
async def delete_session(
    source: str,
    session_type: SessionType,
    session_id: str,
    repository: SessionRepository = Depends(get_session_repository),
):
    """
    Delete a session.

    Returns:
        200: Empty body
        404: Session not found in this source and type
    """
    await repository.delete(source, session_type.value, session_id)
    return Response(status_code=200)


# Health/Monitoring Endpoints


@app.get("/healthz")
async def healthz():
    """
    Minimal health check endpoint for Kubernetes readiness/liveness probes.

    Returns:
        200: Service is running
    """
    return {"status": "ok"}


@app.get("/health")
async def health_check(store: Optional[RedisDocumentStore] = Depends(get_document_store)):
    """
    Health check with store connectivity.

    Returns:
        200: Service healthy
        503: Service unhealthy
    """
    try:
        if store:
            await store.ping()
            redis_status = "connected"
        else:
            redis_status = "disconnected"

        if redis_status == "connected":
            return {"status": "healthy", "redis": redis_status, "version": __version__}
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "redis": redis_status, "version": __version__},
        )
    except redis.RedisError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unhealthy", "error": str(e)})


# Error handlers


def _error_response(status_code: int, exc: Exception, message: str = None, details=None) -> JSONResponse:
    body = ErrorResponse(
        error=message or str(exc), exception=type(exc).__name__, details=details
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request, exc):
    """Handle unknown (source, type, id)."""
    logger.info(f"Session not found: {request.method} {request.url.path}")
    return _error_response(404, exc)


@app.exception_handler(SessionInvalidError)
@app.exception_handler(SessionQueryInvalidError)
async def session_invalid_handler(request, exc):
    """Handle malformed payloads and rejected queries."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return _error_response(400, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc):
    """Handle unknown session types and missing query parameters."""
    logger.warning(f"Invalid request {request.method} {request.url.path}")
    return _error_response(400, exc, message="Invalid request", details=jsonable_errors(exc))


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


@app.exception_handler(redis.ConnectionError)
async def redis_error_handler(request, exc):
    """Handle Redis connection errors."""
    logger.error(f"Redis connection error: {exc}")
    return JSONResponse(status_code=503, content={"error": "Database connection failed"})


@app.exception_handler(ValueError)
async def validation_error_handler(request, exc):
    """Handle validation errors."""
    logger.warning(f"Validation error: {exc}")
    return _error_response(400, exc)


if __name__ == "__main__":
    # Use dict config for logging, not file path
    uvicorn.run(
        "session_service.main:app",
        host=config.get("host"),
        port=config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level")),
    )
