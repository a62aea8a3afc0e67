"""Citation record schemas.

Models:
- CitationItem: one reference inside a citation
- CitationProperties: positional properties (note number)
- CitationRecord: one citation marker's data, as exchanged with the engine
- ContextEntry: (citationID, noteIndex) pair describing a neighbouring citation
- CitationUpdate: (position, text, citationID) tuple applied to the document

Wire names are camelCase (citationID, citationItems, noteIndex); Python
code uses the snake_case attribute names. Both are accepted on input.

Anti-Pattern Compliance:
- AP-1.5: No mutable default arguments (uses Field(default_factory=list))
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================

class CitationMode(str, Enum):
    """Rendering mode reported by the formatting engine."""

    NOTE = "note"
    IN_TEXT = "in-text"


# =============================================================================
# Records
# =============================================================================

class CitationItem(BaseModel):
    """A single reference cited by a citation.

    Extra keys (locator, label, prefix...) are kept as-is so that they
    survive a round trip through the engine and the store.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1, description="Reference item identifier")


class CitationProperties(BaseModel):
    """Positional properties of a citation."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    note_index: int = Field(
        default=0,
        alias="noteIndex",
        ge=0,
        description="1-based footnote number in note mode, 0 in in-text mode",
    )


class CitationRecord(BaseModel):
    """Data behind one citation marker.

    Attributes:
        citation_id: Engine-assigned identifier, None until first confirmed
        citation_items: Ordered references (duplicates allowed)
        properties: Positional properties, see CitationProperties

    Example:
        >>> record = CitationRecord(citation_items=["item01", "item02"])
        >>> record.item_ids
        ['item01', 'item02']
        >>> record.to_wire()
        {'citationItems': [{'id': 'item01'}, {'id': 'item02'}], 'properties': {'noteIndex': 0}}
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    citation_id: str | None = Field(default=None, alias="citationID")
    citation_items: list[CitationItem] = Field(
        default_factory=list,
        alias="citationItems",
    )
    properties: CitationProperties = Field(default_factory=CitationProperties)

    @field_validator("citation_items", mode="before")
    @classmethod
    def _coerce_item_ids(cls, value: Any) -> Any:
        """Accept bare item ID strings in place of item objects."""
        if isinstance(value, (list, tuple)):
            return [{"id": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("citation_id", mode="before")
    @classmethod
    def _empty_id_is_none(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @property
    def note_index(self) -> int:
        """Return the note number of this citation."""
        return self.properties.note_index

    @property
    def item_ids(self) -> list[str]:
        """Return the cited item IDs in order."""
        return [item.id for item in self.citation_items]

    def with_note_index(self, note_index: int) -> CitationRecord:
        """Return a copy carrying a different note number."""
        copy = self.model_copy(deep=True)
        copy.properties.note_index = note_index
        return copy

    def with_items(self, items: list[CitationItem] | list[str]) -> CitationRecord:
        """Return a copy citing a different set of items."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data["citationItems"] = [
            {"id": item} if isinstance(item, str) else item.model_dump()
            for item in items
        ]
        return CitationRecord.model_validate(data)

    def context_entry(self) -> ContextEntry:
        """Return the (citation_id, note_index) pair for this record."""
        return ContextEntry(self.citation_id or "", self.note_index)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with engine/storage field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Positional tuples
# =============================================================================

class ContextEntry(NamedTuple):
    """A neighbouring citation as seen by the engine: identity and order only."""

    citation_id: str
    note_index: int


class CitationUpdate(NamedTuple):
    """Rendered text for the citation at a document position."""

    position: int
    text: str
    citation_id: str


__all__ = [
    "CitationItem",
    "CitationMode",
    "CitationProperties",
    "CitationRecord",
    "CitationUpdate",
    "ContextEntry",
]
