"""Document model, bibliography layout and the reconciler writing engine output."""

from citesync.document.layout import (
    BibliographyLayout,
    BibliographyStyles,
    resolve_styles,
    select_layout,
)
from citesync.document.model import (
    BibliographyContainer,
    CitationMarker,
    Document,
    Footnote,
    NoteContainer,
)


__all__ = [
    "BibliographyContainer",
    "BibliographyLayout",
    "BibliographyStyles",
    "CitationMarker",
    "Document",
    "Footnote",
    "NoteContainer",
    "resolve_styles",
    "select_layout",
]
