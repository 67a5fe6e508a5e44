from __future__ import annotations

from typing import List
from pydantic import BaseModel, Field

from .rules import DEFAULT_REDIRECT_TYPE


class RedirectRecord(BaseModel):
    """One legacy URL mapped to a destination slug.

    ``old`` and ``type`` are fixed once built; only ``destination`` changes.
    """

    old: str = Field(default="", frozen=True)
    destination: str = ""
    type: str = Field(default=DEFAULT_REDIRECT_TYPE, frozen=True)


class SlugListResponse(BaseModel):
    count: int = 0
    slugs: List[str] = Field(default_factory=list)


class SitemapResponse(SlugListResponse):
    preview: List[str] = Field(default_factory=list)


class RedirectListResponse(BaseModel):
    count: int = 0
    redirects: List[RedirectRecord] = Field(default_factory=list)


class DestinationUpdate(BaseModel):
    destination: str = Field(default="", examples=["/checkout"])


class HealthResponse(BaseModel):
    ok: bool = True
