"""SQLAlchemy declarative base for all models."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def import_models() -> None:
    """Import all models so they are registered on ``Base.metadata``."""
    import dormhub.models  # noqa: F401
