"""Pydantic schemas for work metadata records.

The metadata source owns the shape of the payload. Known fields are typed;
anything else it returns is kept in ``extra`` and passed through unmodified.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Circle(BaseModel):
    """Circle (publisher) that released a work."""

    id: int
    name: str

    model_config = {"extra": "ignore"}


class Tag(BaseModel):
    """Genre tag attached to a work."""

    id: int
    name: str

    model_config = {"extra": "ignore"}


class VoiceActor(BaseModel):
    """Voice actor credited on a work."""

    id: int
    name: str

    model_config = {"extra": "ignore"}


class WorkMetadata(BaseModel):
    """
    A catalog record: the fetched metadata plus the folder it was created from.

    ``dir`` is the only field injected by the scanner; it stays None until the
    record is attached to a folder.
    """

    id: int = Field(gt=0)
    title: str
    circle: Circle | None = None
    nsfw: bool = False
    tags: list[Tag] = Field(default_factory=list)
    vas: list[VoiceActor] = Field(default_factory=list)
    dir: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> WorkMetadata:
        """Build from a raw source payload, moving unknown keys into ``extra``."""
        known = set(cls.model_fields) - {"extra"}
        fields = {k: v for k, v in data.items() if k in known}
        extra = dict(data.get("extra") or {})
        extra.update({k: v for k, v in data.items() if k not in known and k != "extra"})
        return cls.model_validate({**fields, "extra": extra})

    def with_dir(self, folder: str) -> WorkMetadata:
        """Return a copy attached to ``folder``."""
        return self.model_copy(update={"dir": folder})


class WorkRef(BaseModel):
    """The (id, dir) projection used by the cleanup pass."""

    id: int
    dir: str

    model_config = {"frozen": True}
