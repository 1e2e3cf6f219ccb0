# userservice/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from userservice.api import users
from userservice.config import Settings, get_settings
from userservice.exceptions import UserServiceError, user_service_exception_handler
from userservice.infra.postgres import build_session_factory, create_db_engine, init_db
from userservice.utils.logger import setup_logger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema first; requests are only served once the table exists
    try:
        init_db(app.state.engine)
    except SQLAlchemyError as e:
        logger.error("Could not prepare users table, aborting startup: %s", e)
        raise
    logger.info("User service ready")
    yield
    app.state.engine.dispose()
    logger.info("Database connections closed")


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the application around one store client.

    Pass `engine` to run against something other than the configured
    Postgres database (tests use in-memory SQLite).
    """
    settings = settings or get_settings()
    setup_logger(settings.LOG_LEVEL)

    app = FastAPI(
        title="User Service",
        version="1.0.0",
        description="Lists and creates users stored in Postgres",
        lifespan=lifespan,
    )

    app.state.engine = engine if engine is not None else create_db_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(UserServiceError, user_service_exception_handler)

    # Register routers
    app.include_router(users.router, tags=["Users"])

    return app


def run():
    settings = get_settings()
    uvicorn.run(
        "userservice.main:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
    )


if __name__ == "__main__":
    run()
