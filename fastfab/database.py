import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlmodel import SQLModel, create_engine, Session

from .config import settings
from .exceptions import DatabaseUnavailableError

logger = logging.getLogger(__name__)

# Postgres "admin shutdown" (57P01) shows up when a managed database recycles connections
TERMINATION_MARKERS = ("57P01", "terminating connection")


def build_engine(db_url: str, echo: bool = False):
    engine_kwargs = {}
    if db_url.startswith("sqlite"):
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False}
        })
    else:
        # Stale pooled connections are detected and replaced by the pool itself
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })
    return create_engine(db_url, echo=echo, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables():
    # Import for side effects: registers every table on SQLModel.metadata
    from .db import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def _is_termination_error(exc: Exception) -> bool:
    message = str(exc)
    return any(marker in message for marker in TERMINATION_MARKERS)


def ensure_connection(session: Session, max_attempts: int = None, delay: float = None, sleep=time.sleep) -> None:
    """Check the session can reach the database, retrying a bounded number of times.

    Raises DatabaseUnavailableError once the attempts are exhausted.
    """
    max_attempts = max_attempts or settings.DB_CONNECT_MAX_ATTEMPTS
    delay = settings.DB_CONNECT_RETRY_DELAY_SECONDS if delay is None else delay

    for attempt in range(1, max_attempts + 1):
        try:
            session.connection().execute(text("SELECT 1"))
            return
        except (OperationalError, DBAPIError) as e:
            session.rollback()
            if attempt == max_attempts:
                logger.error(f"Database unreachable after {max_attempts} attempts: {e}")
                raise DatabaseUnavailableError() from e
            wait = delay * 2 if _is_termination_error(e) else delay
            logger.warning(f"Database connection attempt {attempt}/{max_attempts} failed, retrying in {wait}s: {e}")
            sleep(wait)


def get_session():
    with Session(engine) as session:
        ensure_connection(session)
        yield session
