from .base_model import BaseModel, TimestampModel, utcnow

__all__ = [
    "BaseModel",
    "TimestampModel",
    "utcnow",
]
