"""
Pydantic schema definitions for the catalogue routes.

Records coming back from the provider (apps, reviews, permissions,
categories) are passed through untouched as plain dictionaries; the
models here only describe the envelopes wrapped around them. Field
names follow the JSON wire format, so ``devId`` is exposed through an
alias while Python code uses ``dev_id``.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

AppDetail = Dict[str, Any]


class ListEnvelope(BaseModel):
    """A list of provider records with optional pagination links.

    ``prev`` and ``next`` are absolute URLs reproducing the current
    request with a single offset field changed. They are only set when
    more data may exist in that direction; routes serialise this model
    with ``response_model_exclude_unset`` so missing links are omitted
    rather than rendered as ``null``. A provider answering ``None`` is
    treated as an empty list.
    """

    results: List[Any] = Field(default_factory=list)
    prev: Optional[str] = None
    next: Optional[str] = None

    @field_validator("results", mode="before")
    @classmethod
    def none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class Suggestion(BaseModel):
    term: str
    url: str


class Index(BaseModel):
    """Discovery document listing the top-level collections."""

    apps: str
    developers: str
    categories: str


class DeveloperBundle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dev_id: str = Field(alias="devId")
    apps: Any = Field(default_factory=list)


class ReadableDeveloperBundle(DeveloperBundle):
    """Developer apps with full details; apps that failed to load are dropped."""

    apps: List[Any] = Field(default_factory=list)
    failed: int = 0


class BestEffortDeveloperBundle(DeveloperBundle):
    """Developer apps with full details, or the summary record when a lookup failed."""

    apps: List[Any] = Field(default_factory=list)
    fallbacks: int = 0


class ErrorEnvelope(BaseModel):
    message: str


class MissingDeveloperEnvelope(ErrorEnvelope):
    example: str
