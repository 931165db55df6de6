# dormhub/services/common/__init__.py
"""
Shared service-layer infrastructure.

- **UnitOfWork**: transaction boundary and repository factory
- **security**: identity token verification
- **permissions**: role checks over the acting principal
- **mapping**: ORM-to-schema conversion
- **pagination**: paginated response builders
- **errors**: service-layer exception hierarchy
"""
from __future__ import annotations

from . import errors, mapping, pagination, permissions, security
from .unit_of_work import TransactionError, UnitOfWork

__all__ = [
    "errors",
    "mapping",
    "pagination",
    "permissions",
    "security",
    "TransactionError",
    "UnitOfWork",
]
