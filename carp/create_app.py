"""
FastAPI application factory following kkb_fastapi pattern.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from carp.api import (
    admin_router,
    analytics_router,
    factors_router,
    trips_router,
    users_router,
    vehicles_router,
)
from carp.core.config import get_config
from carp.core.exceptions import CarpError
from carp.database.base import apply_db_migration, engine_kw, get_db_url, is_sqlite
from carp.database.session_manager.db_session import Database

logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def register_routers(app: FastAPI):
    """Register all API routers."""
    app.include_router(factors_router)
    app.include_router(vehicles_router)
    app.include_router(trips_router)
    app.include_router(users_router)
    app.include_router(analytics_router)
    app.include_router(admin_router)


def register_exception_handlers(app: FastAPI):
    """Map domain and framework errors to JSON responses."""

    @app.exception_handler(CarpError)
    async def carp_error_handler(request: Request, exc: CarpError):
        if exc.status_code >= 500:
            logging.error(f"{type(exc).__name__}: {exc.message}", exc_info=exc.__cause__)
        else:
            logging.info(f"{type(exc).__name__}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        logging.error(f"HTTPException occurred: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code, content={"detail": str(exc.detail)}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": jsonable_errors(exc),
                "message": "Validation error",
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logging.error(f"Exception occurred: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold exception instances that JSON cannot encode
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Handles database migrations, initialization and cleanup.
    """
    logging.info("Application startup")
    config = app.state.config
    async_db_url = get_db_url(config)

    if config.data.get("app", {}).get("apply_migrations", False):
        await apply_db_migration(config)

    Database.init(async_db_url, engine_kw=None if is_sqlite(async_db_url) else engine_kw)
    logging.info("Initialized database")

    try:
        yield
    finally:
        await Database.dispose()
        logging.info("Application shutdown")


def get_app(config_file: str) -> FastAPI:
    """
    Application factory function.

    Args:
        config_file: Configuration file name (e.g., "production.toml")

    Returns:
        Configured FastAPI application instance
    """
    config = get_config(config_file)

    app = FastAPI(
        title=config.data.get("api", {}).get("title", "Carbon Planner API"),
        description=config.data.get("api", {}).get(
            "description", "Vehicle, trip and CO2 emission tracking"
        ),
        version=config.data.get("api", {}).get("version", "1.0.0"),
        debug=config.data.get("api", {}).get("debug", False),
        lifespan=lifespan,
        # Generate better OpenAPI schema for enums
        generate_unique_id_function=lambda route: (
            f"{route.tags[0]}-{route.name}" if route.tags else route.name
        ),
    )

    app.state.config = config

    # Register routers and error handlers
    register_routers(app)
    register_exception_handlers(app)

    # Set up CORS middleware
    origins = [
        "http://localhost:3000",  # For local development
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app
