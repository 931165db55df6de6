# dormhub/services/common/mapping.py
"""
Model-schema mapping utilities.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ServiceError

TSchema = TypeVar("TSchema", bound=BaseModel)


class MappingError(ServiceError):
    """Raised when model-to-schema conversion fails."""

    def __init__(self, message: str, source_obj: Any = None) -> None:
        super().__init__(message, details={"source_type": type(source_obj).__name__})
        self.source_obj = source_obj


def to_schema(obj: Any, schema_cls: Type[TSchema], **extra: Any) -> TSchema:
    """
    Convert an ORM model to a Pydantic schema.

    Keyword arguments are merged over the model's attributes, for view
    fields that are not columns.

    Example:
        >>> to_schema(room, MatchingRoomResponse, has_pending_request=True)
    """
    if obj is None:
        raise MappingError(f"Cannot convert None to {schema_cls.__name__}", source_obj=obj)

    try:
        if not extra:
            return schema_cls.model_validate(obj)
        fields = {
            name: getattr(obj, name)
            for name in schema_cls.model_fields
            if name not in extra and hasattr(obj, name)
        }
        fields.update(extra)
        return schema_cls.model_validate(fields)
    except PydanticValidationError as exc:
        raise MappingError(
            f"Failed to convert {type(obj).__name__} to {schema_cls.__name__}: {exc}",
            source_obj=obj,
        ) from exc


def to_schema_list(objs: Iterable[Any], schema_cls: Type[TSchema]) -> List[TSchema]:
    return [to_schema(obj, schema_cls) for obj in objs]
