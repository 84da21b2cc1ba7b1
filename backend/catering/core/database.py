from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from catering.config import get_settings

settings = get_settings()

engine = create_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Session factory for work that outlives the request (background tasks)."""
    return SessionLocal


@contextmanager
def transaction(db: Session):
    """Commit everything done inside the block as one unit, or nothing."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
