"""
Database engine, session factory and declarative base
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator

from logistik.core.config import settings


def _connect_args(url: str) -> dict:
    # Request handlers run in a threadpool; sqlite connections must be shareable
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


engine = create_engine(settings.database_url, connect_args=_connect_args(settings.database_url),
                       echo=settings.DEBUG)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; routers commit, the session is always closed"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create missing tables on ``bind`` (the app engine by default)"""
    import logistik.models  # noqa: F401  registers the tables on Base
    Base.metadata.create_all(bind=bind or engine)
