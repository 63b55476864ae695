from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from catalog_hub.core.config import get_settings


def build_engine(database_uri: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_uri.startswith("sqlite") else {}
    return create_engine(database_uri, pool_pre_ping=True, connect_args=connect_args)


engine = build_engine(get_settings().DATABASE_URI)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
