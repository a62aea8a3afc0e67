"""Core module - Configuration, logging, constants and exceptions.

Exports:
    - Settings, get_settings: Pydantic Settings configuration
    - configure_logging, get_logger: Structured logging (structlog)
    - StorageKey, Timeouts, AVAILABLE_STYLES: constants
    - Exception classes: CitationSyncError, LedgerInvariantError, etc.
"""

from citesync.core.config import Settings, get_settings
from citesync.core.constants import (
    AVAILABLE_STYLES,
    DEFAULT_LOCALE,
    DEFAULT_STYLE,
    StorageKey,
    Timeouts,
)
from citesync.core.exceptions import (
    CitationSyncError,
    CitationValidationError,
    EngineConnectionError,
    EngineError,
    EngineProtocolError,
    EngineTimeoutError,
    LedgerInvariantError,
    StorageError,
)
from citesync.core.logging import configure_logging, get_logger


__all__ = [
    "AVAILABLE_STYLES",
    "DEFAULT_LOCALE",
    "DEFAULT_STYLE",
    # Exceptions
    "CitationSyncError",
    "CitationValidationError",
    "EngineConnectionError",
    "EngineError",
    "EngineProtocolError",
    "EngineTimeoutError",
    "LedgerInvariantError",
    # Configuration
    "Settings",
    "StorageError",
    # Constants
    "StorageKey",
    "Timeouts",
    # Logging
    "configure_logging",
    "get_logger",
    "get_settings",
]
