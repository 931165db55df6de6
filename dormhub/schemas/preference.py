# --- File: dormhub/schemas/preference.py ---
"""Room preference schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator

from dormhub.schemas.common.base import BaseSchema
from dormhub.schemas.common.enums import RoomType

__all__ = ["PreferenceUpdate", "PreferenceResponse"]


class PreferenceUpdate(BaseSchema):
    """Only fields present in the payload are changed; ``null`` clears a field."""

    room_type: Optional[RoomType] = None
    preferred_services: Optional[List[int]] = None

    @field_validator("preferred_services")
    @classmethod
    def dedupe_services(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        return list(dict.fromkeys(v))


class PreferenceResponse(BaseSchema):
    user_id: int
    room_type: Optional[RoomType] = None
    preferred_services: List[int] = Field(default_factory=list)
