# dormhub/db/init_db.py
"""Database initialization utilities."""
import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from dormhub.db.base import Base, import_models
from dormhub.db.session import engine as default_engine

logger = logging.getLogger(__name__)


def init_db(engine: Engine = default_engine) -> None:
    """
    Create any missing tables.

    Suitable for development and tests; production schemas are managed
    outside the application.
    """
    import_models()

    existing_tables = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    created = set(Base.metadata.tables) - existing_tables
    if created:
        logger.info("Created %d database tables", len(created))
    else:
        logger.info("Database already initialized with %d tables", len(existing_tables))
