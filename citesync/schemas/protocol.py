"""Formatting engine message schemas.

Two request kinds and their matching responses:

- initialize: full reset with a style, a locale and the known citations
- registerCitation: incremental update of one citation in its ordered context

Bibliography payloads arrive as a two-element array ``[flags, entries]``
(or null when the style has no bibliography) and are decoded into
BibliographyData.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from citesync.schemas.citations import (
    CitationMode,
    CitationRecord,
    CitationUpdate,
    ContextEntry,
)


class RebuildEntry(NamedTuple):
    """One citation as reported by an initialize response."""

    citation_id: str
    note_index: int
    text: str


# =============================================================================
# Bibliography
# =============================================================================

class BibliographyFormat(BaseModel):
    """Layout flags sent with the bibliography entries.

    The engine sends numbers or strings for some flags (e.g.
    ``"second-field-align": "flush"``); only their truthiness matters here.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    hangingindent: bool = False
    second_field_align: bool = Field(default=False, alias="second-field-align")
    maxoffset: float | None = None

    @field_validator("hangingindent", "second_field_align", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


class BibliographyData(BaseModel):
    """Rendered bibliography: layout flags plus serialized entries."""

    format: BibliographyFormat = Field(default_factory=BibliographyFormat)
    entries: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            flags = value[0] if len(value) > 0 and value[0] else {}
            entries = value[1] if len(value) > 1 and value[1] else []
            return {"format": flags, "entries": entries}
        return value

    @property
    def is_empty(self) -> bool:
        """Return True when there is nothing to render."""
        return not self.entries


def _null_to_list(value: Any) -> Any:
    return [] if value is None else value


# =============================================================================
# Requests
# =============================================================================

class InitializeRequest(BaseModel):
    """Full reset of the engine."""

    model_config = ConfigDict(populate_by_name=True)

    style_id: str = Field(..., alias="styleID", min_length=1)
    locale_id: str = Field(..., alias="localeID", min_length=1)
    citation_by_index: list[CitationRecord] = Field(
        default_factory=list,
        alias="citationByIndex",
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RegisterCitationRequest(BaseModel):
    """Insert, edit or re-anchor one citation between its neighbours."""

    model_config = ConfigDict(populate_by_name=True)

    citation: CitationRecord
    before: list[ContextEntry] = Field(default_factory=list)
    after: list[ContextEntry] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Responses
# =============================================================================

class InitializeResponse(BaseModel):
    """Engine state after a full reset."""

    model_config = ConfigDict(populate_by_name=True)

    mode: CitationMode
    rebuild_data: list[RebuildEntry] = Field(default_factory=list, alias="rebuildData")
    bibliography_data: BibliographyData | None = Field(
        default=None,
        alias="bibliographyData",
    )

    @field_validator("rebuild_data", mode="before")
    @classmethod
    def _coerce_rebuild(cls, value: Any) -> Any:
        return _null_to_list(value)

    @field_validator("bibliography_data", mode="before")
    @classmethod
    def _no_bibliography(cls, value: Any) -> Any:
        return value or None


class RegisterCitationResponse(BaseModel):
    """Engine state after registering one citation."""

    model_config = ConfigDict(populate_by_name=True)

    citation_by_index: list[CitationRecord] = Field(
        default_factory=list,
        alias="citationByIndex",
    )
    citation_data: list[CitationUpdate] = Field(default_factory=list, alias="citationData")
    bibliography_data: BibliographyData | None = Field(
        default=None,
        alias="bibliographyData",
    )

    @field_validator("citation_by_index", "citation_data", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> Any:
        return _null_to_list(value)

    @field_validator("bibliography_data", mode="before")
    @classmethod
    def _no_bibliography(cls, value: Any) -> Any:
        return value or None


__all__ = [
    "BibliographyData",
    "BibliographyFormat",
    "InitializeRequest",
    "InitializeResponse",
    "RebuildEntry",
    "RegisterCitationRequest",
    "RegisterCitationResponse",
]
