"""Pydantic schemas for config files and catalog records."""

from rjsync.schemas.config import ConfigSchema, validate_config
from rjsync.schemas.work import Circle, Tag, VoiceActor, WorkMetadata, WorkRef

__all__ = [
    "Circle",
    "ConfigSchema",
    "Tag",
    "VoiceActor",
    "WorkMetadata",
    "WorkRef",
    "validate_config",
]
