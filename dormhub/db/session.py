"""Database session management."""
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from dormhub.config.settings import settings


def engine_options(url: str) -> Dict[str, Any]:
    """Engine keyword arguments appropriate for the database URL."""
    options: Dict[str, Any] = {
        "pool_pre_ping": True,
        "echo": settings.DB_ECHO,
    }
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.DB_POOL_SIZE
        options["max_overflow"] = settings.DB_POOL_OVERFLOW
    return options


database_url = settings.get_database_url()
engine = create_engine(database_url, **engine_options(database_url))

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)
