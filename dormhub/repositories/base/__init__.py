from .base_repository import BaseRepository, ModelType

__all__ = ["BaseRepository", "ModelType"]
