# dormhub/services/__init__.py
"""
Service layer root package.

Each subpackage implements application use-cases on top of:

- SQLAlchemy models (dormhub.models.*)
- Repositories (dormhub.repositories.*)
- Pydantic schemas (dormhub.schemas.*)
- Common service infrastructure (dormhub.services.common.*)

Typical pattern for a service:

    class SomeService:
        def __init__(self, session_factory: Callable[[], Session]) -> None:
            self._session_factory = session_factory

        def some_use_case(self, actor, ...):
            require_admin(actor)
            with UnitOfWork(self._session_factory) as uow:
                repo = uow.get_repo(SomeRepository)
                ...
"""

from dormhub.services.common import UnitOfWork, mapping, pagination, permissions, security

__all__ = [
    "UnitOfWork",
    "security",
    "permissions",
    "mapping",
    "pagination",
]
