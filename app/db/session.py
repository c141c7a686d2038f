import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from app.core.config import settings
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {"connect_timeout": 30}


# Create the SQLAlchemy engine
engine = create_engine(settings.DATABASE_URL,
                       connect_args=_connect_args(settings.DATABASE_URL),
                       pool_pre_ping=True,
                       pool_recycle=3600,
)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# do not change the order of the code below
# Dependency that can be used in routes to get the session
def get_db() -> Session  |  HTTPException:
    db = SessionLocal()  # generate a new SessionLocal
    try:
        yield db
    except Exception as e:
        db.rollback()
        if isinstance(e, HTTPException):
            raise e
        elif isinstance(e, SQLAlchemyError):
            logger.exception("database error: %s", e)
            raise HTTPException(status_code=503, detail="Database unavailable")
        else:
            logger.exception("database session aborted: %s", e)
            raise HTTPException(status_code=500, detail="Query data error")
    finally:
        db.close()
