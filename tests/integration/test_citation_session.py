"""Integration tests for CitationSession.

Drive a whole editing session against FakeFormattingEngine: load,
insert, edit, delete, switch style, and restart from a file-backed store.
"""

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from citesync.core.config import Settings
from citesync.core.exceptions import CitationValidationError
from citesync.document.model import Document
from citesync.handlers.edit import EditOutcome
from citesync.schemas.citations import CitationMode
from citesync.session import CitationSession, build_store
from citesync.storage.backends import InMemoryBackend, JsonFileBackend
from tests.fakes.fake_engine import IN_TEXT_STYLE, NOTE_STYLE, FakeFormattingEngine


pytestmark = pytest.mark.integration


def _assert_in_sync(session: CitationSession) -> None:
    """Ledger, document markers and note numbers agree."""
    ledger = session.context.ledger.get()
    assert session.document.marker_ids() == [record.citation_id for record in ledger]
    if session.context.mode is CitationMode.NOTE:
        expected = [str(index + 1) for index in range(len(ledger))]
        assert session.document.footnote_numbers() == expected
        assert [record.note_index for record in ledger] == list(range(1, len(ledger) + 1))
    else:
        assert all(record.note_index == 0 for record in ledger)


@pytest.fixture
def session(test_settings: Settings, fake_engine: FakeFormattingEngine) -> CitationSession:
    return CitationSession(
        document=Document(),
        transport=fake_engine,
        store=build_store(test_settings),
        settings=test_settings,
    )


class TestEditingSession:
    """A sequence of user edits keeps everything in step."""

    @pytest.mark.asyncio
    async def test_insert_edit_delete(self, session: CitationSession) -> None:
        report = await session.load()
        assert not report.was_reset
        assert session.ready

        first = session.insert_marker(0)
        assert await session.edit(first, ["item01"]) is EditOutcome.REGISTERED
        second = session.insert_marker(1)
        assert await session.edit(second, ["item02"]) is EditOutcome.REGISTERED
        third = session.insert_marker(0)
        assert await session.edit(third, ["item03"]) is EditOutcome.REGISTERED
        _assert_in_sync(session)
        assert session.document.marker_ids() == ["CITATION-3", "CITATION-1", "CITATION-2"]

        assert await session.edit(first, ["item01", "item04"]) is EditOutcome.REGISTERED
        _assert_in_sync(session)
        assert first.hidden_text == "item01; item04."

        assert await session.edit(third, []) is EditOutcome.DELETED
        _assert_in_sync(session)
        assert session.document.marker_ids() == ["CITATION-1", "CITATION-2"]

        assert await session.edit(first, []) is EditOutcome.DELETED
        assert await session.edit(second, []) is EditOutcome.REINITIALIZED
        assert len(session.document) == 0
        assert session.document.note_container.hidden
        assert session.document.bibliography.hidden
        assert session.ready

    @pytest.mark.asyncio
    async def test_style_switch_rerenders(self, session: CitationSession) -> None:
        await session.load()
        for position, item in enumerate(["item01", "item02"]):
            await session.edit(session.insert_marker(position), [item])

        await session.set_style(IN_TEXT_STYLE)

        assert session.context.mode is CitationMode.IN_TEXT
        assert [marker.html for marker in session.document.markers] == ["(item01)", "(item02)"]
        assert session.document.note_container.hidden
        assert session.document.bibliography.entry_style is not None
        assert await session.store.get_default_style() == IN_TEXT_STYLE
        _assert_in_sync(session)

        await session.set_style(NOTE_STYLE)

        assert session.document.footnote_numbers() == ["1", "2"]
        _assert_in_sync(session)

    @pytest.mark.asyncio
    async def test_set_locale_reinitializes(
        self,
        session: CitationSession,
        fake_engine: FakeFormattingEngine,
    ) -> None:
        await session.load()

        await session.set_locale("de-DE")

        assert fake_engine.calls("initialize")[-1]["request"].locale_id == "de-DE"
        assert await session.store.get_default_locale() == "de-DE"

    @pytest.mark.asyncio
    async def test_empty_style_rejected(self, session: CitationSession) -> None:
        await session.load()

        with pytest.raises(CitationValidationError):
            await session.set_style("")

    @pytest.mark.asyncio
    async def test_context_manager_closes_transport(
        self,
        session: CitationSession,
        fake_engine: FakeFormattingEngine,
    ) -> None:
        async with session:
            await session.load()

        assert fake_engine.closed

    @pytest.mark.asyncio
    async def test_close_waits_for_outstanding_request(
        self,
        session: CitationSession,
        fake_engine: FakeFormattingEngine,
    ) -> None:
        await session.load()
        fake_engine.hold()
        edit = asyncio.create_task(session.edit(session.insert_marker(0), ["item01"]))
        while not session.client.busy:
            await asyncio.sleep(0)

        closing = asyncio.create_task(session.close())
        for _ in range(5):
            await asyncio.sleep(0)
        assert not fake_engine.closed

        fake_engine.release()
        await closing

        assert fake_engine.closed
        assert await edit is EditOutcome.REGISTERED
        _assert_in_sync(session)

    def test_setup_logging_uses_session_settings(
        self,
        test_settings: Settings,
        fake_engine: FakeFormattingEngine,
    ) -> None:
        with patch("citesync.session.configure_logging") as mock_configure:
            CitationSession(transport=fake_engine, settings=test_settings, setup_logging=True)

        mock_configure.assert_called_once_with(test_settings)

    def test_logging_left_alone_by_default(
        self,
        test_settings: Settings,
        fake_engine: FakeFormattingEngine,
    ) -> None:
        with patch("citesync.session.configure_logging") as mock_configure:
            CitationSession(transport=fake_engine, settings=test_settings)

        mock_configure.assert_not_called()

    def test_available_styles(self) -> None:
        styles = CitationSession.available_styles()

        assert styles["jm-oscola"] == "JM OSCOLA"
        assert len(styles) == 8


class TestRestart:
    """State persisted by one session is recovered by the next."""

    @pytest.mark.asyncio
    async def test_reload_from_file_store(self, test_settings: Settings, tmp_path: Path) -> None:
        settings = test_settings.model_copy(update={"storage_path": str(tmp_path / "doc.json")})
        first = CitationSession(transport=FakeFormattingEngine(), settings=settings)
        assert isinstance(first.store.backend, JsonFileBackend)
        await first.load()
        for position, item in enumerate(["item01", "item02", "item03"]):
            await first.edit(first.insert_marker(position), [item])
        await first.close()

        # Saved document: markers kept, IDs not
        reopened = Document.with_citations([None, None, None])
        second = CitationSession(
            document=reopened,
            transport=FakeFormattingEngine(),
            settings=settings,
        )
        report = await second.load()

        assert not report.was_reset
        assert reopened.marker_ids() == ["CITATION-1", "CITATION-2", "CITATION-3"]
        assert reopened.footnote_numbers() == ["1", "2", "3"]
        _assert_in_sync(second)

    @pytest.mark.asyncio
    async def test_reload_with_lost_markers_resets(self, test_settings: Settings) -> None:
        store = build_store(test_settings)
        first = CitationSession(transport=FakeFormattingEngine(), store=store, settings=test_settings)
        await first.load()
        await first.edit(first.insert_marker(0), ["item01"])
        await first.edit(first.insert_marker(1), ["item02"])

        second = CitationSession(
            document=Document.with_citations([None]),
            transport=FakeFormattingEngine(),
            store=store,
            settings=test_settings,
        )
        report = await second.load()

        assert report.reset_reasons == ["marker-mismatch"]
        assert len(second.document) == 0
        assert await store.get_citation_by_index() == []


class TestBuildStore:
    """Store selection from settings."""

    def test_in_memory_without_path(self, test_settings: Settings) -> None:
        assert isinstance(build_store(test_settings).backend, InMemoryBackend)
