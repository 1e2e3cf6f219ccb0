import logging
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from userservice.config import Settings
from userservice.models.base import Base

logger = logging.getLogger(__name__)

# =========================
# ENGINE CONFIGURATION
# =========================

def create_db_engine(settings: Settings) -> Engine:
    """
    Build the store client from settings.

    Nothing connects here; the pool opens connections on first use.
    """
    url = settings.database_url
    options = {"echo": settings.DB_ECHO}

    if url.startswith("postgresql"):
        options.update(
            pool_pre_ping=True,   # Check connections before using them
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=3600,    # Recycle connections every hour
        )

    return create_engine(url, **options)

# =========================
# SESSION CONFIGURATION
# =========================

def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine
    )

# =========================
# DATABASE FUNCTIONS
# =========================

def get_db(request: Request):
    """
    FastAPI dependency to provide a DB session to routes.
    Usage:
        def my_route(db: Session = Depends(get_db)):
            ...

    The session factory lives on `app.state`, set up by `create_app`.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def db_session(session_factory: sessionmaker):
    """
    Context manager for standalone DB operations.
    Usage:
        with db_session(factory) as db:
            users = db.query(User).all()
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine):
    """
    Create the users table if it does not exist yet.
    Safe to call on every boot.
    """
    # Import models here to register them with Base
    from userservice.models.user import User  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready: %s", ", ".join(Base.metadata.tables))


def check_connection(engine: Engine) -> bool:
    """
    Test DB connection.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database connection failed: %s", e)
        return False

    logger.info("Database connection successful")
    return True
