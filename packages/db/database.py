import os

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


def get_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    user = os.getenv("POSTGRES_USER", "app")
    password = os.getenv("POSTGRES_PASSWORD", "app")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    db_name = os.getenv("POSTGRES_DB", "brushing")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{db_name}"


def _engine_options(url: str) -> dict:
    # History lookups run in worker threads; sqlite must allow that.
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


class Base(DeclarativeBase):
    pass


DATABASE_URL = get_database_url()
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(drop: bool = False) -> None:
    """Create the brushing tables. Tests and local runs use this instead of migrations."""
    import packages.db.models  # noqa: F401

    if drop:
        Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
