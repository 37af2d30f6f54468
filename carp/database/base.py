"""
Database base configuration following kkb_fastapi pattern.

Handles async engine creation (PostgreSQL in deployments, SQLite for tests)
and Alembic migrations.
"""
import asyncio
import contextlib
import functools
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as alembic_config
from sqlalchemy import event, text
from sqlalchemy.engine.url import URL
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from carp.core.config import Config

DEFAULT_DRIVERNAME = "postgresql+asyncpg"

engine_kw = {
    "pool_pre_ping": True,
    # feature will normally emit SQL equivalent to "SELECT 1" each time a connection is checked out from the pool
    "pool_size": 2,  # number of connections to keep open at a time
    "max_overflow": 4,  # number of connections to allow to be opened above pool_size
    "connect_args": {
        "prepared_statement_cache_size": 0,  # disable prepared statement cache
        "statement_cache_size": 0,  # disable statement cache
    },
}


def get_db_url(config: Config) -> URL:
    """
    Construct database URL from config.
    """
    config_db = {"drivername": DEFAULT_DRIVERNAME, **config.data["db"]}
    return URL.create(**config_db)


def is_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE clauses unless foreign keys are switched on
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_async_engine(async_db_url: URL, engine_kw: dict | None = None) -> AsyncEngine:
    """
    Create async database engine with connection pooling.

    Pool and asyncpg options do not apply to SQLite and are dropped there.
    """
    if is_sqlite(async_db_url):
        async_engine = create_async_engine(async_db_url)
        event.listen(async_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return async_engine

    options = {
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "pool_size": 60,
        "max_overflow": 80,
        "pool_timeout": 30,
    }
    options.update(engine_kw or {})
    return create_async_engine(async_db_url, **options)


async def create_database(config: Config) -> bool:
    """
    Ensures the database specified in the config exists.
    Connects to a maintenance database (e.g., 'postgres') to issue the CREATE DATABASE command.

    Args:
        config: The application configuration.

    Returns:
        True if the database was newly created by this function.
        False if the database already existed or the backend is SQLite.

    Raises:
        ValueError: If the database name is missing in the configuration.
        Exception: If any other unexpected error occurs during the database creation process.
    """
    if is_sqlite(get_db_url(config)):
        # SQLite creates the file on first connect
        return False

    logging.info("Creating database...")
    # Work on a copy of the original DB parameters to avoid modifying the input config
    original_db_params_copy = {"drivername": DEFAULT_DRIVERNAME, **config.data["db"]}
    target_database_name = original_db_params_copy.pop("database", None)

    if not target_database_name:
        logging.error("Database name not found in configuration for creation.")
        raise ValueError("Database name missing in configuration for creation.")

    if "user" in original_db_params_copy and "username" not in original_db_params_copy:
        original_db_params_copy["username"] = original_db_params_copy.pop("user")

    # Connect to the default 'postgres' maintenance database
    maintenance_url = URL.create(**{**original_db_params_copy, "database": "postgres"})
    maintenance_engine = None
    try:
        maintenance_engine = get_async_engine(maintenance_url)
        logging.info(
            f"Attempting to create database '{target_database_name}' in "
            f"{original_db_params_copy.get('host')} if it does not exist."
        )
        async with maintenance_engine.connect() as connection:
            # For PostgreSQL, CREATE DATABASE cannot run inside a transaction block.
            autocommit_connection = await connection.execution_options(
                isolation_level="AUTOCOMMIT"
            )
            await autocommit_connection.execute(
                text(f'CREATE DATABASE "{target_database_name}"')
            )
        logging.info(f"Database '{target_database_name}' created successfully.")
        return True
    except DBAPIError as e:
        # PostgreSQL error code '42P04' is duplicate_database
        with contextlib.suppress(AttributeError):
            if (
                hasattr(e, "orig")
                and e.orig is not None
                and hasattr(e.orig, "pgcode")
                and e.orig.pgcode == "42P04"
            ):
                logging.warning(
                    f"Database '{target_database_name}' already exists (detected by pgcode '42P04'). No action taken."
                )
                return False

        logging.error(
            f"A DBAPIError occurred while trying to create database '{target_database_name}': {e}"
        )
        raise
    finally:
        if maintenance_engine:
            await maintenance_engine.dispose()


def get_sync_db_url(config: Config) -> str:
    """Database URL for Alembic, which runs on a synchronous driver."""
    async_url = get_db_url(config)
    sync_drivername = "sqlite" if is_sqlite(async_url) else "postgresql+psycopg2"
    return async_url.set(drivername=sync_drivername).render_as_string(
        hide_password=False
    )


async def apply_db_migration(config: Config):
    """
    Apply database migrations before the application starts serving requests.

    Args:
        config: The application configuration containing database connection details.
    """
    await create_database(config)

    project_root = Path(__file__).resolve().parent.parent.parent
    alembic_cfg = alembic_config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option(
        "script_location", str(project_root / "alembic_migrations")
    )
    # configparser treats "%" as interpolation syntax
    alembic_cfg.set_main_option(
        "sqlalchemy.url", get_sync_db_url(config).replace("%", "%%")
    )

    # Alembic is synchronous; run it in a worker thread so the event loop stays free
    logging.info("Starting database migrations...")
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(
        None, functools.partial(command.upgrade, alembic_cfg, "head")
    )
    logging.info("Database migration completed successfully")
