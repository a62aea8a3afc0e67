"""Test configuration and shared fixtures.

Pattern: Pytest fixtures, conftest.py
Anti-Pattern Avoided: Fixture reuse without explicit scope
"""

import pytest

from citesync.context import SyncContext
from citesync.core.config import Settings
from citesync.document.model import Document
from citesync.document.reconciler import DocumentReconciler
from citesync.engine.client import FormattingEngineClient
from citesync.handlers.edit import EditTransactionHandler
from citesync.schemas.citations import CitationRecord
from citesync.storage.backends import InMemoryBackend
from citesync.storage.store import CitationStore
from tests.fakes.fake_engine import NOTE_STYLE, FakeFormattingEngine


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with safe defaults."""
    return Settings(
        environment="test",
        log_level="DEBUG",
        default_style=NOTE_STYLE,
        default_locale="en-US",
        engine_url="http://engine.test",
        storage_path=None,
    )


# ============================================================================
# State Fixtures
# ============================================================================

@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(backend: InMemoryBackend, test_settings: Settings) -> CitationStore:
    return CitationStore(
        backend,
        default_style=test_settings.default_style,
        default_locale=test_settings.default_locale,
    )


@pytest.fixture
def document() -> Document:
    return Document()


@pytest.fixture
def context(test_settings: Settings, store: CitationStore, document: Document) -> SyncContext:
    return SyncContext(settings=test_settings, store=store, document=document)


@pytest.fixture
def sample_records() -> list[CitationRecord]:
    """Three confirmed citations numbered for note mode."""
    return [
        CitationRecord(citation_id="a", citation_items=["item01"], properties={"noteIndex": 1}),
        CitationRecord(citation_id="b", citation_items=["item02"], properties={"noteIndex": 2}),
        CitationRecord(
            citation_id="c",
            citation_items=["item03", "item01"],
            properties={"noteIndex": 3},
        ),
    ]


# ============================================================================
# Component Fixtures
# ============================================================================

@pytest.fixture
def fake_engine() -> FakeFormattingEngine:
    return FakeFormattingEngine()


@pytest.fixture
def reconciler(context: SyncContext) -> DocumentReconciler:
    return DocumentReconciler(context)


@pytest.fixture
def client(
    context: SyncContext,
    fake_engine: FakeFormattingEngine,
    reconciler: DocumentReconciler,
) -> FormattingEngineClient:
    return FormattingEngineClient(context, fake_engine, reconciler)


@pytest.fixture
def handler(
    context: SyncContext,
    client: FormattingEngineClient,
    reconciler: DocumentReconciler,
) -> EditTransactionHandler:
    return EditTransactionHandler(context, client, reconciler)

