"""Formatting engine client - single-flight request channel.

At most one request to the formatting engine is outstanding at any time.
The readiness flag is cleared when a request is sent and set again once
its response has been applied. A registration attempted while the flag
is clear is dropped, never queued; the next user action re-derives its
context from the ledger and tries again.

Responses are always applied when they arrive; there is no cancellation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from citesync.context import SyncContext
from citesync.core.exceptions import LedgerInvariantError
from citesync.core.logging import get_logger
from citesync.document.reconciler import DocumentReconciler
from citesync.engine.transport import FormattingEngineTransport
from citesync.ledger.ledger import check_note_sequence
from citesync.schemas.citations import CitationRecord, CitationUpdate, ContextEntry
from citesync.schemas.protocol import (
    InitializeRequest,
    InitializeResponse,
    RebuildEntry,
    RegisterCitationRequest,
    RegisterCitationResponse,
)


logger = get_logger(__name__)

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


def rebuild_to_updates(rebuild_data: Sequence[RebuildEntry]) -> list[CitationUpdate]:
    """Convert initialize rebuild data into citation updates.

    After a full reset the engine lists citations in document order, so the
    arrival index is the document position.

    Args:
        rebuild_data: (citation_id, note_index, text) entries

    Returns:
        (position, text, citation_id) updates
    """
    return [
        CitationUpdate(position=index, text=entry.text, citation_id=entry.citation_id)
        for index, entry in enumerate(rebuild_data)
    ]


def _merge_note_indexes(
    records: Sequence[CitationRecord],
    rebuild_data: Sequence[RebuildEntry],
) -> list[CitationRecord]:
    """Adopt the note numbers the engine reports for known citations."""
    reported = {entry.citation_id: entry.note_index for entry in rebuild_data}
    merged = []
    for record in records:
        if record.citation_id in reported:
            merged.append(record.with_note_index(reported[record.citation_id]))
        else:
            merged.append(record.model_copy(deep=True))
    return merged


class FormattingEngineClient:
    """Client for the external citation formatting engine.

    The client starts not ready: the first initialize call opens it.

    Example:
        >>> client = FormattingEngineClient(context, transport, reconciler)
        >>> await client.initialize("jm-oscola", "en-GB", [])
        >>> client.ready
        True
    """

    def __init__(
        self,
        context: SyncContext,
        transport: FormattingEngineTransport,
        reconciler: DocumentReconciler,
    ) -> None:
        self._context = context
        self._transport = transport
        self._reconciler = reconciler
        self._ready = False
        self._in_flight: asyncio.Future[bool] | None = None

    @property
    def ready(self) -> bool:
        """Return True when a registration would be sent."""
        return self._ready and self._in_flight is None

    @property
    def busy(self) -> bool:
        """Return True while a request is outstanding."""
        return self._in_flight is not None

    @property
    def transport(self) -> FormattingEngineTransport:
        return self._transport

    def mark_ready(self) -> bool:
        """Open the channel if no request is outstanding.

        Returns:
            True if the client is now ready
        """
        if self._in_flight is not None:
            logger.debug("Engine busy, readiness unchanged")
            return False
        self._ready = True
        return True

    async def wait_until_idle(self) -> bool:
        """Wait for the outstanding request, if any.

        Returns:
            Readiness after the request completed
        """
        if self._in_flight is not None:
            return await asyncio.shield(self._in_flight)
        return self._ready

    # -------------------------------------------------------------------------
    # Request slot
    # -------------------------------------------------------------------------

    async def _send(
        self,
        operation: str,
        call: Callable[[RequestT], Awaitable[ResponseT]],
        request: RequestT,
    ) -> ResponseT:
        self._ready = False
        self._in_flight = asyncio.get_running_loop().create_future()
        logger.info("Engine request sent", operation=operation)
        try:
            return await call(request)
        except Exception as e:
            # Stays not ready; a later initialize reopens the channel.
            logger.error("Engine request failed", operation=operation, error=str(e))
            self._release(ready=False)
            raise

    def _release(self, ready: bool) -> None:
        in_flight, self._in_flight = self._in_flight, None
        self._ready = ready
        if in_flight is not None and not in_flight.done():
            in_flight.set_result(ready)

    def _check_note_sequence(self) -> None:
        # The engine owns note numbering; a gap is reported, not repaired.
        try:
            check_note_sequence(self._context.ledger.get(), self._context.mode)
        except LedgerInvariantError as e:
            logger.warning(
                "Engine note numbers out of sequence",
                invariant=e.invariant,
                error=str(e),
            )

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def initialize(
        self,
        style_id: str,
        locale_id: str,
        citation_by_index: Sequence[CitationRecord] | None = None,
    ) -> InitializeResponse | None:
        """Reset the engine and re-render every citation.

        Args:
            style_id: Citation style identifier
            locale_id: Locale identifier
            citation_by_index: Known citations in document order

        Returns:
            The engine response, or None if a request was already outstanding
        """
        if self._in_flight is not None:
            logger.debug("Engine busy, initialize dropped", style_id=style_id)
            return None

        records = [record.model_copy(deep=True) for record in citation_by_index or ()]
        request = InitializeRequest(
            style_id=style_id,
            locale_id=locale_id,
            citation_by_index=records,
        )
        response = await self._send("initialize", self._transport.initialize, request)

        try:
            self._context.mode = response.mode
            self._context.ledger.replace(_merge_note_indexes(records, response.rebuild_data))
            await self._reconciler.apply_citations(
                response.mode,
                rebuild_to_updates(response.rebuild_data),
            )
            self._reconciler.apply_bibliography(response.bibliography_data)
            await self._reconciler.persist_ledger()
        finally:
            self._release(ready=True)

        logger.info(
            "Engine initialized",
            style_id=style_id,
            locale_id=locale_id,
            mode=response.mode.value,
            citations=len(response.rebuild_data),
        )
        return response

    async def register_citation(
        self,
        citation: CitationRecord,
        before: Sequence[ContextEntry],
        after: Sequence[ContextEntry],
    ) -> RegisterCitationResponse | None:
        """Register one citation between its neighbours.

        Dropped without effect when the client is not ready.

        Args:
            citation: Inserted, edited or re-anchored citation
            before: Context pairs of preceding citations
            after: Context pairs of following citations

        Returns:
            The engine response, or None if the request was dropped
        """
        if not self.ready:
            logger.debug(
                "Engine not ready, registration dropped",
                citation_id=citation.citation_id,
            )
            return None

        request = RegisterCitationRequest(
            citation=citation.model_copy(deep=True),
            before=list(before),
            after=list(after),
        )
        response = await self._send(
            "registerCitation",
            self._transport.register_citation,
            request,
        )

        try:
            self._context.ledger.replace(response.citation_by_index)
            await self._reconciler.apply_citations(self._context.mode, response.citation_data)
            self._reconciler.apply_bibliography(response.bibliography_data)
            await self._reconciler.persist_ledger()
        finally:
            self._release(ready=True)

        self._check_note_sequence()
        logger.info(
            "Citation registered",
            citations=len(response.citation_by_index),
            updated=len(response.citation_data),
        )
        return response


__all__ = ["FormattingEngineClient", "rebuild_to_updates"]
