"""Database engine, session factory and request-scoped session dependency."""
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from app.config import settings
from app.errors import UpstreamError

logger = logging.getLogger(__name__)


def _connect_args(url: str, timeout: int) -> dict:
    """Driver-level timeouts so no store call blocks indefinitely."""
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout}
    if url.startswith(("postgresql", "mysql")):
        return {"connect_timeout": timeout}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL, settings.DB_TIMEOUT_SECONDS),
    pool_pre_ping=True,
    **({} if settings.DATABASE_URL.startswith("sqlite") else {"pool_timeout": settings.DB_TIMEOUT_SECONDS}),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a session for one request and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db: Session, action: str) -> None:
    """Commit the request's unit of work, rolling everything back on failure."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Rolled back %s: %s", action, e)
        raise UpstreamError(f"Could not {action}", details={"error": str(e)}) from e
