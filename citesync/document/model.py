"""In-memory document model written to by the reconciler.

The document is reduced to what the synchronization engine reads and
writes:

- citation markers in document order, each optionally carrying a
  citation ID and rendered content
- a note container holding regenerated footnotes (note mode)
- a bibliography container with entries and per-part layout styles

Markers are compared by identity: two markers with equal content are
still different places in the document.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from citesync.core.exceptions import CitationValidationError


@dataclass(eq=False)
class CitationMarker:
    """Placeholder for one in-text citation.

    In note mode the marker shows a footnote number and keeps the rendered
    citation in a hidden part, from which the note container is rebuilt.
    In in-text mode the marker shows the rendered citation directly.
    """

    citation_id: str | None = None
    text: str = ""
    footnote_mark: str | None = None
    hidden_text: str | None = None

    def set_footnote(self, number: int, text: str) -> None:
        """Show a footnote number and stash the citation text."""
        self.footnote_mark = str(number)
        self.hidden_text = text
        self.text = ""

    def set_text(self, text: str) -> None:
        """Show the citation text inline."""
        self.footnote_mark = None
        self.hidden_text = None
        self.text = text

    @property
    def has_footnote(self) -> bool:
        return self.footnote_mark is not None

    @property
    def html(self) -> str:
        """Return the marker's inner markup."""
        if self.footnote_mark is not None:
            return (
                f'<span class="footnote-mark">{self.footnote_mark}</span>'
                f'<span hidden="true">{self.hidden_text or ""}</span>'
            )
        return self.text


@dataclass
class Footnote:
    """One regenerated note."""

    number: int
    text: str

    @property
    def html(self) -> str:
        return (
            '<span class="footnote">'
            f'<span class="footnote-number">{self.number}</span>'
            f'<span class="footnote-text">{self.text}</span>'
            "</span>"
        )


@dataclass
class NoteContainer:
    """Out-of-line footnote block."""

    hidden: bool = True
    notes: list[Footnote] = field(default_factory=list)

    def clear(self) -> None:
        self.notes.clear()

    def append(self, note: Footnote) -> None:
        self.notes.append(note)


@dataclass
class BibliographyContainer:
    """Bibliography block and the styles applied to its parts.

    Style setters are the only layout calls the reconciler makes; each
    applies to every element of its kind (entry, left-margin number,
    right-inline body).
    """

    hidden: bool = True
    entries: list[str] = field(default_factory=list)
    entry_style: str | None = None
    left_margin_style: str | None = None
    right_inline_style: str | None = None

    def set_entries(self, entries: list[str]) -> None:
        """Replace the entries and drop any previous styling."""
        self.entries = list(entries)
        self.entry_style = None
        self.left_margin_style = None
        self.right_inline_style = None

    def style_entries(self, style: str) -> None:
        self.entry_style = style

    def style_left_margins(self, style: str) -> None:
        self.left_margin_style = style

    def style_right_inlines(self, style: str) -> None:
        self.right_inline_style = style

    @property
    def html(self) -> str:
        return "\n".join(self.entries)


class Document:
    """Citation markers plus note and bibliography containers.

    Example:
        >>> document = Document()
        >>> marker = document.insert_marker(0)
        >>> document.index_of(marker)
        0
    """

    def __init__(self, markers: list[CitationMarker] | None = None) -> None:
        self.markers: list[CitationMarker] = list(markers or [])
        self.note_container = NoteContainer()
        self.bibliography = BibliographyContainer()

    @classmethod
    def with_citations(cls, citation_ids: list[str | None]) -> Document:
        """Build a document whose markers carry the given IDs."""
        return cls([CitationMarker(citation_id=citation_id) for citation_id in citation_ids])

    def insert_marker(self, position: int, citation_id: str | None = None) -> CitationMarker:
        """Insert a new marker before the marker currently at ``position``.

        Raises:
            CitationValidationError: If position is outside 0..len(markers)
        """
        if not 0 <= position <= len(self.markers):
            raise CitationValidationError(
                f"Cannot insert marker at {position} in document of {len(self.markers)}",
                field="position",
                value=position,
            )
        marker = CitationMarker(citation_id=citation_id)
        self.markers.insert(position, marker)
        return marker

    def marker_at(self, position: int) -> CitationMarker:
        if not 0 <= position < len(self.markers):
            raise CitationValidationError(
                f"No marker at {position} in document of {len(self.markers)}",
                field="position",
                value=position,
            )
        return self.markers[position]

    def index_of(self, marker: CitationMarker) -> int:
        """Return the document position of ``marker``.

        Raises:
            CitationValidationError: If the marker is not in the document
        """
        for index, candidate in enumerate(self.markers):
            if candidate is marker:
                return index
        raise CitationValidationError(
            "Marker is not part of the document",
            field="marker",
            value=marker.citation_id,
        )

    def find_marker(self, citation_id: str) -> CitationMarker | None:
        for marker in self.markers:
            if marker.citation_id == citation_id:
                return marker
        return None

    def remove_marker(self, marker: CitationMarker) -> None:
        del self.markers[self.index_of(marker)]

    def remove_all_markers(self) -> int:
        count = len(self.markers)
        self.markers.clear()
        return count

    def marker_ids(self) -> list[str | None]:
        return [marker.citation_id for marker in self.markers]

    def footnote_numbers(self) -> list[str | None]:
        """Return the visible footnote number of every marker, in order."""
        return [marker.footnote_mark for marker in self.markers]

    def __len__(self) -> int:
        return len(self.markers)

    def __repr__(self) -> str:
        return f"Document(markers={self.marker_ids()!r})"


__all__ = [
    "BibliographyContainer",
    "CitationMarker",
    "Document",
    "Footnote",
    "NoteContainer",
]
