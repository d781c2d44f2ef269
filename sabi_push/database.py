from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from .config import settings


def make_engine(db_url: str):
    """Engine for the token store.

    SQLite (the local fallback) is shared between request worker threads and
    the sweep scheduler thread; server databases get pre-ping so the daily
    sweep doesn't trip over connections dropped overnight.
    """
    if db_url.startswith("sqlite"):
        return create_engine(db_url, connect_args={"check_same_thread": False}, future=True)
    return create_engine(db_url, pool_pre_ping=True, future=True)


engine = make_engine(settings.DB_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False)
Base = declarative_base()
