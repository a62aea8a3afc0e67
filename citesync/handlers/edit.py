"""Edit transaction handler - one user edit of one citation marker.

Decides from the ledger and the requested items what the edit means:

- items on a marker with an ID: edit, register the updated citation
- items on a marker without an ID: insertion, register a new citation
- no items on a marker with an ID: deletion, re-anchor or reset the engine
- no items on a marker without an ID: abandoned insertion, drop the marker

Insertion and edit are told apart only by whether the marker carries an
ID, never by comparing item sets.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from citesync.context import SyncContext
from citesync.core.exceptions import LedgerInvariantError
from citesync.core.logging import get_logger
from citesync.document.model import CitationMarker
from citesync.document.reconciler import DocumentReconciler
from citesync.engine.client import FormattingEngineClient
from citesync.ledger.ledger import expected_note_index, renumber
from citesync.ledger.split import compute_split
from citesync.schemas.citations import (
    CitationItem,
    CitationProperties,
    CitationRecord,
)


logger = get_logger(__name__)


class EditOutcome(str, Enum):
    """What an edit turned into."""

    REGISTERED = "registered"        # insertion or edit sent to the engine
    DROPPED = "dropped"              # engine busy, nothing sent
    DELETED = "deleted"              # citation removed, engine re-anchored
    REINITIALIZED = "reinitialized"  # last citation removed, engine reset
    DISCARDED = "discarded"          # unconfirmed marker removed


class EditTransactionHandler:
    """Applies user edits to the ledger, document and engine."""

    def __init__(
        self,
        context: SyncContext,
        client: FormattingEngineClient,
        reconciler: DocumentReconciler,
    ) -> None:
        self._context = context
        self._client = client
        self._reconciler = reconciler

    def insert_marker(self, position: int) -> CitationMarker:
        """Place a new, unconfirmed marker at a document position."""
        marker = self._context.document.insert_marker(position)
        logger.debug("Marker inserted", position=position)
        return marker

    def _records_in_document_order(self) -> list[CitationRecord]:
        """Rebuild the record sequence from the identified markers."""
        records = []
        for marker in self._context.document.markers:
            if not marker.citation_id:
                continue
            record = self._context.ledger.find_by_id(marker.citation_id)
            if record is None:
                raise LedgerInvariantError(
                    f"Marker carries unknown citation ID {marker.citation_id!r}",
                    invariant="record-present",
                )
            records.append(record)
        return records

    def _edit_position(self, marker: CitationMarker) -> int:
        """Index of ``marker`` among markers that are, or are becoming, citations."""
        position = 0
        for candidate in self._context.document.markers:
            if candidate is marker:
                return position
            if candidate.citation_id:
                position += 1
        # index_of raises the proper error for a foreign marker
        return self._context.document.index_of(marker)

    async def handle_edit(
        self,
        marker: CitationMarker,
        item_ids: Sequence[str | CitationItem],
    ) -> EditOutcome:
        """Apply the item set chosen for ``marker``.

        Args:
            marker: Marker under edit (new markers carry no citation ID)
            item_ids: Requested references, in order; empty to remove

        Returns:
            EditOutcome describing what was done
        """
        context = self._context
        context.document.index_of(marker)

        items = [
            item if isinstance(item, CitationItem) else CitationItem(id=item)
            for item in item_ids
        ]

        # A held response still carries the pre-edit ledger, so nothing may
        # change until it has been applied. Deletions reopen an idle client.
        if self._client.busy or (items and not self._client.ready):
            logger.info("Edit dropped, engine not ready", citation_id=marker.citation_id)
            return EditOutcome.DROPPED

        # Local note numbers can drift from document order between
        # requests; the engine needs them in sequence for back-references.
        records = renumber(self._records_in_document_order(), context.mode)
        context.ledger.replace(records)
        await self._reconciler.persist_ledger()

        if not items:
            if marker.citation_id:
                return await self._delete(marker, marker.citation_id)
            context.document.remove_marker(marker)
            logger.info("Unconfirmed citation discarded")
            return EditOutcome.DISCARDED

        inserted = marker.citation_id is None
        split = compute_split(records, self._edit_position(marker), inserted=inserted)
        note_number = len(split.before) + 1 if context.is_note_mode else 0

        if split.target is not None:
            citation = split.target.with_items(items)
        else:
            citation = CitationRecord(
                citation_items=items,
                properties=CitationProperties(note_index=note_number),
            )

        response = await self._client.register_citation(citation, split.before, split.after)
        if response is None:
            logger.info("Edit dropped, engine busy", citation_id=marker.citation_id)
            return EditOutcome.DROPPED

        logger.info(
            "Citation inserted" if inserted else "Citation edited",
            note_index=note_number,
            items=len(items),
        )
        return EditOutcome.REGISTERED

    async def _delete(self, marker: CitationMarker, citation_id: str) -> EditOutcome:
        context = self._context
        index = context.ledger.index_of(citation_id)
        if index is None:
            raise LedgerInvariantError(
                f"Citation {citation_id!r} missing from ledger",
                invariant="record-present",
            )

        context.document.remove_marker(marker)
        await self._reconciler.forget_position(citation_id)

        records = list(context.ledger.get())
        remaining = records[:index] + records[index + 1:]
        if context.is_note_mode:
            remaining[index:] = [
                record.with_note_index(record.note_index - 1) for record in remaining[index:]
            ]
        context.ledger.replace(remaining)
        logger.info("Citation deleted", citation_id=citation_id, remaining=len(remaining))

        if not remaining:
            await self._client.initialize(
                await context.store.get_default_style(),
                await context.store.get_default_locale(),
                [],
            )
            return EditOutcome.REINITIALIZED

        # The engine recomputes back-references from the citation it is told
        # comes first, so re-anchor on the first record numbered from 1.
        first = remaining[0].with_note_index(expected_note_index(0, context.mode))
        remaining = [first, *renumber(remaining, context.mode)[1:]]
        context.ledger.replace(remaining)
        split = compute_split(remaining)

        self._client.mark_ready()
        response = await self._client.register_citation(split.target, split.before, split.after)
        if response is None:
            return EditOutcome.DROPPED
        return EditOutcome.DELETED


__all__ = ["EditOutcome", "EditTransactionHandler"]
