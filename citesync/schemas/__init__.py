"""Schemas for citation records and formatting engine messages."""

from citesync.schemas.citations import (
    CitationItem,
    CitationMode,
    CitationProperties,
    CitationRecord,
    CitationUpdate,
    ContextEntry,
)
from citesync.schemas.protocol import (
    BibliographyData,
    BibliographyFormat,
    InitializeRequest,
    InitializeResponse,
    RebuildEntry,
    RegisterCitationRequest,
    RegisterCitationResponse,
)


__all__ = [
    "BibliographyData",
    "BibliographyFormat",
    "CitationItem",
    "CitationMode",
    "CitationProperties",
    "CitationRecord",
    "CitationUpdate",
    "ContextEntry",
    "InitializeRequest",
    "InitializeResponse",
    "RebuildEntry",
    "RegisterCitationRequest",
    "RegisterCitationResponse",
]
