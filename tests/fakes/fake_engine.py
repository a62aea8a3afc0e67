"""Fake formatting engine for unit and integration tests.

In-memory implementation of FormattingEngineTransport. It keeps its own
registry of citations like a real engine, assigns IDs, numbers notes by
position and renders citations from their item IDs.

Supports call recording, error injection, and holding responses until
released (to test the single-flight guard).

Pattern: FakeClient for testing
"""

from __future__ import annotations

import asyncio
from typing import Any

from citesync.schemas.citations import (
    CitationMode,
    CitationRecord,
    CitationUpdate,
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


NOTE_STYLE = "jm-chicago-fullnote-bibliography"
IN_TEXT_STYLE = "chicago-author-date"

NOTE_STYLES = frozenset({
    "jm-chicago-fullnote-bibliography",
    "jm-indigobook",
    "jm-indigobook-law-review",
    "jm-oscola",
})


class FakeFormattingEngine:
    """Fake formatting engine (FormattingEngineTransport duck typing).

    Note styles (NOTE_STYLES) report note mode, any other style in-text
    mode. In-text bibliographies use a hanging indent.

    Attributes:
        call_history: Recorded calls as {"method": ..., "request": ...}

    Example:
        >>> engine = FakeFormattingEngine()
        >>> response = await engine.initialize(request)
        >>> engine.call_history[0]["method"]
        'initialize'
    """

    def __init__(
        self,
        note_styles: frozenset[str] = NOTE_STYLES,
        error_on: dict[str, Exception] | None = None,
        hold: bool = False,
    ) -> None:
        """Initialize the fake engine.

        Args:
            note_styles: Styles rendered in note mode
            error_on: Dict mapping method names to exceptions to raise
            hold: Block every response until release() is called
        """
        self._note_styles = note_styles
        self._error_on = error_on or {}
        self._gate = asyncio.Event()
        if not hold:
            self._gate.set()
        self._mode = CitationMode.IN_TEXT
        self._citations: list[CitationRecord] = []
        self._next_id = 1
        self.closed = False
        self.call_history: list[dict[str, Any]] = []

    # -------------------------------------------------------------------------
    # Test controls
    # -------------------------------------------------------------------------

    def hold(self) -> None:
        """Block responses until release()."""
        self._gate.clear()

    def release(self) -> None:
        """Let held responses through."""
        self._gate.set()

    def calls(self, method: str) -> list[dict[str, Any]]:
        return [call for call in self.call_history if call["method"] == method]

    def clear_history(self) -> None:
        self.call_history = []

    def _check_error(self, method: str) -> None:
        if method in self._error_on:
            raise self._error_on[method]

    def _record_call(self, method: str, request: Any) -> None:
        self.call_history.append({"method": method, "request": request})

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _new_id(self) -> str:
        citation_id = f"CITATION-{self._next_id}"
        self._next_id += 1
        return citation_id

    def _render(self, record: CitationRecord) -> str:
        items = "; ".join(record.item_ids)
        if self._mode == CitationMode.NOTE:
            return f"{items}."
        return f"({items})"

    def _number(self, records: list[CitationRecord]) -> list[CitationRecord]:
        return [
            record.with_note_index(index + 1 if self._mode == CitationMode.NOTE else 0)
            for index, record in enumerate(records)
        ]

    def _bibliography(self) -> BibliographyData:
        item_ids = sorted({item for record in self._citations for item in record.item_ids})
        flags = BibliographyFormat(hangingindent=self._mode == CitationMode.IN_TEXT)
        return BibliographyData(
            format=flags,
            entries=[f'<div class="csl-entry">{item_id}</div>' for item_id in item_ids],
        )

    # -------------------------------------------------------------------------
    # Transport protocol
    # -------------------------------------------------------------------------

    async def initialize(self, request: InitializeRequest) -> InitializeResponse:
        self._check_error("initialize")
        self._record_call("initialize", request)
        await self._gate.wait()

        self._mode = (
            CitationMode.NOTE if request.style_id in self._note_styles else CitationMode.IN_TEXT
        )
        records = []
        for record in request.citation_by_index:
            if not record.citation_id:
                record = record.model_copy(update={"citation_id": self._new_id()})
            records.append(record)
        self._citations = self._number(records)

        return InitializeResponse(
            mode=self._mode,
            rebuild_data=[
                RebuildEntry(record.citation_id or "", record.note_index, self._render(record))
                for record in self._citations
            ],
            bibliography_data=self._bibliography(),
        )

    async def register_citation(
        self, request: RegisterCitationRequest
    ) -> RegisterCitationResponse:
        self._check_error("register_citation")
        self._record_call("register_citation", request)
        await self._gate.wait()

        known = {record.citation_id: record for record in self._citations}
        citation = request.citation
        if not citation.citation_id:
            citation = citation.model_copy(update={"citation_id": self._new_id()})

        ordered = [known[entry.citation_id] for entry in request.before]
        ordered.append(citation)
        ordered.extend(known[entry.citation_id] for entry in request.after)
        self._citations = self._number(ordered)

        position = len(request.before)
        target = self._citations[position]
        return RegisterCitationResponse(
            citation_by_index=self._citations,
            citation_data=[
                CitationUpdate(position, self._render(target), target.citation_id or ""),
            ],
            bibliography_data=self._bibliography(),
        )

    async def close(self) -> None:
        self.closed = True
