#!/usr/bin/env python3
"""
app.py
--------------------
FastAPI application factory.

The application owns its collaborators for its whole lifetime: the
MementosDB handle, the storage backend, the payment client and the auth
provider are built once (or injected, in tests) and kept on
``app.state``. The database handle is disposed at shutdown.

Errors raised by managers and collaborators are turned into JSON bodies
of the form ``{"error": "..."}``; internal failures are logged with their
context and reported with a generic message.

Usage:
    app = create_app(Settings.load())
    uvicorn.run(app)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from contextlib import asynccontextmanager
from typing import Dict, Optional, Type

# --- Third party imports ---
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# --- Local imports ---
from mementos import __version__
from mementos.core.config import Settings
from mementos.core.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    MementosError,
    NotFoundError,
    PaymentError,
    StorageError,
    ValidationError,
    WebhookError,
)
from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.database import MementosDB
from mementos.services import AuthProvider, HeaderAuthProvider, LocalStorage, StripePayments
from .routers import (
    attributes,
    collections,
    events,
    memories,
    people,
    places,
    reflections,
    system,
    uploads,
)

STATUS_CODES: Dict[Type[MementosError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    ConflictError: 409,
    AuthenticationError: 401,
    WebhookError: 400,
    StorageError: 502,
    PaymentError: 502,
    DatabaseError: 500,
}

INTERNAL_ERROR_MESSAGE = "An internal error occurred"


def status_for(error: MementosError) -> int:
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[MementosDB] = None,
    auth: Optional[AuthProvider] = None,
    storage: Optional[LocalStorage] = None,
    payments: Optional[StripePayments] = None,
    logger: Optional[MementosLogger] = None,
) -> FastAPI:
    """
    Build the HTTP application.

    Args:
        settings: Process settings (loaded from file and environment if None)
        db: Database handle; built from settings at startup if None
        auth: Identity provider (header-based by default)
        storage: Object storage backend (local directory by default)
        payments: Payment client (from settings; None disables checkout)
        logger: Logger for the 'api' component

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings.load()
    if logger is None:
        logger = MementosLogger(settings.log_dir, component_name="api")
    owns_db = db is None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.db is None:
            app.state.db = MementosDB.from_settings(settings)
            app.state.db.create_schema()
        safe_logger(logger).log_operation("api_startup", {"version": __version__})
        try:
            yield
        finally:
            if owns_db and app.state.db is not None:
                app.state.db.dispose()
                app.state.db = None
            safe_logger(logger).log_operation("api_shutdown")

    app = FastAPI(title="Mementos", version=__version__, lifespan=lifespan)

    app.state.settings = settings
    app.state.logger = logger
    app.state.db = db
    app.state.auth = auth or HeaderAuthProvider()
    app.state.storage = storage or LocalStorage.from_settings(settings, logger=logger)
    app.state.payments = payments or StripePayments.from_settings(settings, logger=logger)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        safe_logger(logger).log_request(
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(MementosError)
    async def handle_mementos_error(request: Request, exc: MementosError) -> JSONResponse:
        status_code = status_for(exc)
        context = {"path": request.url.path, "method": request.method}
        if status_code >= 500:
            safe_logger(logger).log_error(exc, context)
        else:
            safe_logger(logger).log_debug("request_rejected", {**context, "error": str(exc)})

        message = INTERNAL_ERROR_MESSAGE if isinstance(exc, DatabaseError) else str(exc)
        return JSONResponse(status_code=status_code, content={"error": message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
        return JSONResponse(status_code=422, content={"error": "; ".join(problems)})

    for module in (
        system,
        people,
        places,
        events,
        memories,
        reflections,
        attributes,
        collections,
        uploads,
    ):
        app.include_router(module.router)

    return app
