"""Custom exceptions for the citation synchronization engine.

All exceptions are namespaced to avoid shadowing Python builtins
(no bare TimeoutError / ConnectionError subclasses).

Pattern: Namespaced Custom Exceptions
"""

from typing import Any


class CitationSyncError(Exception):
    """Base exception for all citation synchronization errors.

    All citesync exceptions inherit from this class to enable
    catching any of them with a single except clause.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """Initialize citation sync error.

        Args:
            message: Error description
            cause: Original exception that caused this error
        """
        self.message = message
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class CitationValidationError(CitationSyncError):
    """Raised when caller input is invalid.

    Distinct from Python's built-in ValueError to carry the
    offending field and value.
    """

    def __init__(
        self,
        message: str,
        field: str,
        value: Any | None = None,
    ) -> None:
        """Initialize validation error.

        Args:
            message: Error description
            field: The field or argument that failed validation
            value: The invalid value
        """
        self.field = field
        self.value = value
        super().__init__(message)


class LedgerInvariantError(CitationSyncError):
    """Raised when the citation ledger would violate one of its invariants.

    Also raised when a record that must exist (its marker carries an
    identifier) cannot be found. That state is unreachable once stored
    data has passed startup recovery, so it is not handled locally.
    """

    def __init__(self, message: str, invariant: str) -> None:
        """Initialize invariant error.

        Args:
            message: Error description
            invariant: Short name of the violated invariant
        """
        self.invariant = invariant
        super().__init__(message)


class EngineError(CitationSyncError):
    """Base class for formatting engine failures."""

    def __init__(
        self,
        message: str,
        operation: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize engine error.

        Args:
            message: Error description
            operation: Engine operation that failed (initialize, registerCitation)
            cause: Original exception that caused this error
        """
        self.operation = operation
        super().__init__(message, cause)


class EngineConnectionError(EngineError):
    """Raised when the formatting engine cannot be reached or answers with an error status."""

    def __init__(
        self,
        message: str,
        operation: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, operation, cause)


class EngineTimeoutError(EngineError):
    """Raised when a formatting engine request exceeds its timeout."""

    def __init__(
        self,
        message: str,
        operation: str,
        timeout_seconds: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(message, operation, cause)


class EngineProtocolError(EngineError):
    """Raised when a formatting engine response does not match the message contract."""


class StorageError(CitationSyncError):
    """Raised when a persistence backend fails to write a value."""

    def __init__(
        self,
        message: str,
        key: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize storage error.

        Args:
            message: Error description
            key: Storage key being written
            cause: Original exception that caused this error
        """
        self.key = key
        super().__init__(message, cause)
