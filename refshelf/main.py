"""Refshelf — reference file catalog API.

FastAPI entry point with lifespan management, token sweeping, and CORS.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.router import api_router
from .api.routes.auth import envelope
from .auth.errors import ConfigurationError
from .database import close_engine, create_tables
from .dependencies import get_app_config, get_auth_settings, get_token_sweeper
from .middleware.error_handler import register_error_handlers
from .middleware.request_id import RequestIDMiddleware
from .utils.logging import get_logger, setup_logging

config = get_app_config()
setup_logging(
    debug=config.debug,
    log_dir=config.log_dir,
    log_max_bytes=config.log_max_bytes,
    log_backup_count=config.log_backup_count,
)
logger = get_logger("refshelf.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    # --- Startup ---
    logger.info("refshelf_starting", host=config.host, port=config.port)

    # The service must not come up without a signing secret
    try:
        auth_settings = get_auth_settings()
    except ConfigurationError as e:
        logger.critical("auth_configuration_invalid", error=e.message)
        raise

    await create_tables(config)
    logger.info("database_initialized")

    sweeper = get_token_sweeper()
    sweeper.start()

    logger.info("refshelf_started", app=config.app_name, auth=repr(auth_settings))

    yield

    # --- Shutdown ---
    logger.info("refshelf_shutting_down")
    await sweeper.stop()
    await close_engine()
    logger.info("refshelf_stopped")


app = FastAPI(
    title="REFSHELF",
    description="Reference file catalog API",
    version="1.0.0",
    lifespan=lifespan,
)

register_error_handlers(app, debug=config.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in config.cors_allowed_origin.split(",") if o.strip()],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=[h.strip() for h in config.cors_allowed_headers.split(",") if h.strip()],
    max_age=config.cors_max_age,
)

# Added last so it runs first
app.add_middleware(RequestIDMiddleware)

app.include_router(api_router)


@app.get("/")
async def root():
    return envelope("API Root")


def run() -> None:
    """Console entry point."""
    uvicorn.run("refshelf.main:app", host=config.host, port=config.port, reload=config.debug)


if __name__ == "__main__":
    run()
