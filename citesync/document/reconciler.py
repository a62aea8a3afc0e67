"""Document reconciler - applies engine output to the document.

Citation updates are applied in up to three passes:

1. Identity: markers seen for the first time receive their citation ID,
   and their position is recorded in the persisted position map.
2. Content: note mode writes a footnote number plus a hidden copy of the
   citation text into each updated marker; in-text mode writes the text.
3. Note mode only: every marker is renumbered 1..N in document order and
   the note container is rebuilt from the hidden texts. The engine does
   not report changes that only affect numbering, so this covers markers
   it did not touch.
"""

from __future__ import annotations

from collections.abc import Sequence

from citesync.context import SyncContext
from citesync.core.exceptions import LedgerInvariantError
from citesync.core.logging import get_logger
from citesync.document.layout import BibliographyLayout, resolve_styles
from citesync.document.model import CitationMarker, Footnote
from citesync.schemas.citations import CitationMode, CitationUpdate
from citesync.schemas.protocol import BibliographyData


logger = get_logger(__name__)


class DocumentReconciler:
    """Writes formatted citations and bibliography into the document.

    Example:
        >>> reconciler = DocumentReconciler(context)
        >>> await reconciler.apply_citations(CitationMode.NOTE, updates)
        >>> reconciler.apply_bibliography(bibliography)
        >>> await reconciler.persist_ledger()
    """

    def __init__(self, context: SyncContext) -> None:
        self._context = context

    @property
    def context(self) -> SyncContext:
        return self._context

    # -------------------------------------------------------------------------
    # Citations
    # -------------------------------------------------------------------------

    async def apply_citations(
        self,
        mode: CitationMode,
        updates: Sequence[CitationUpdate],
    ) -> None:
        """Apply rendered citations to the document.

        Args:
            mode: Rendering mode reported by the engine
            updates: (position, text, citation_id) tuples to apply
        """
        logger.debug("Applying citations", mode=mode.value, updates=len(updates))
        await self._assign_identifiers(updates)

        if mode == CitationMode.NOTE:
            self._apply_note_mode(updates)
        else:
            self._apply_in_text_mode(updates)

    async def _assign_identifiers(self, updates: Sequence[CitationUpdate]) -> None:
        document = self._context.document
        changed = False
        for update in updates:
            marker = document.marker_at(update.position)
            if marker.citation_id:
                continue
            marker.citation_id = update.citation_id
            self._context.positions[update.citation_id] = document.index_of(marker)
            changed = True
            logger.debug(
                "Marker identified",
                citation_id=update.citation_id,
                position=update.position,
            )
        if changed:
            await self._context.store.set_citation_id_to_pos(dict(self._context.positions))

    def _marker_for(self, update: CitationUpdate) -> CitationMarker:
        marker = self._context.document.find_marker(update.citation_id)
        if marker is None:
            raise LedgerInvariantError(
                f"No marker carries citation ID {update.citation_id!r}",
                invariant="marker-present",
            )
        return marker

    def _apply_note_mode(self, updates: Sequence[CitationUpdate]) -> None:
        document = self._context.document
        notes = document.note_container
        notes.hidden = not updates

        for update in updates:
            self._marker_for(update).set_footnote(update.position + 1, update.text)

        for index, marker in enumerate(document.markers):
            if marker.has_footnote:
                marker.footnote_mark = str(index + 1)
            else:
                marker.set_footnote(index + 1, marker.text)

        notes.clear()
        for index, marker in enumerate(document.markers):
            notes.append(Footnote(number=index + 1, text=marker.hidden_text or ""))

    def _apply_in_text_mode(self, updates: Sequence[CitationUpdate]) -> None:
        notes = self._context.document.note_container
        notes.hidden = True
        notes.clear()
        for update in updates:
            self._marker_for(update).set_text(update.text)

    # -------------------------------------------------------------------------
    # Bibliography
    # -------------------------------------------------------------------------

    def apply_bibliography(self, data: BibliographyData | None) -> None:
        """Replace the bibliography and apply its layout policy.

        An empty payload hides the bibliography and leaves styles alone.
        """
        bibliography = self._context.document.bibliography
        if data is None or data.is_empty:
            bibliography.hidden = True
            return

        bibliography.set_entries(data.entries)
        styles = resolve_styles(data.format)
        if styles.layout != BibliographyLayout.FLOW:
            if styles.entry is not None:
                bibliography.style_entries(styles.entry)
            if styles.left_margin is not None:
                bibliography.style_left_margins(styles.left_margin)
            if styles.right_inline is not None:
                bibliography.style_right_inlines(styles.right_inline)
        bibliography.hidden = False
        logger.debug(
            "Bibliography applied",
            entries=len(data.entries),
            layout=styles.layout.value,
        )

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def persist_ledger(self) -> None:
        """Write the current ledger through the store."""
        await self._context.store.set_citation_by_index(list(self._context.ledger.get()))

    async def forget_position(self, citation_id: str) -> None:
        """Drop a deleted citation from the position map and persist it."""
        if self._context.positions.pop(citation_id, None) is not None:
            await self._context.store.set_citation_id_to_pos(dict(self._context.positions))


__all__ = ["DocumentReconciler"]
