"""Formatting engine transports.

FormattingEngineTransport is the message contract with the external
formatter. HttpFormattingEngine implements it over HTTP with a shared
httpx.AsyncClient; tests substitute an in-memory fake.

Pattern: Protocol duck typing
Anti-Pattern Mitigation: #12 (Connection Pooling via shared client)
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol, TypeVar, runtime_checkable

import httpx
from pydantic import BaseModel, ValidationError

from citesync.core.constants import (
    ENDPOINT_INITIALIZE,
    ENDPOINT_REGISTER_CITATION,
    Timeouts,
)
from citesync.core.exceptions import (
    EngineConnectionError,
    EngineProtocolError,
    EngineTimeoutError,
)
from citesync.core.logging import get_logger
from citesync.schemas.protocol import (
    InitializeRequest,
    InitializeResponse,
    RegisterCitationRequest,
    RegisterCitationResponse,
)


logger = get_logger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


@runtime_checkable
class FormattingEngineTransport(Protocol):
    """Protocol for formatting engine transports.

    Methods:
        initialize: Reset the engine with a style, locale and citations
        register_citation: Register one citation in its ordered context
        close: Release transport resources
    """

    async def initialize(self, request: InitializeRequest) -> InitializeResponse:
        """Send a full-reset request and return the decoded response."""
        ...

    async def register_citation(
        self, request: RegisterCitationRequest
    ) -> RegisterCitationResponse:
        """Send a registration request and return the decoded response."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...


class HttpFormattingEngine:
    """HTTP transport for a citation formatting service.

    Posts camelCase JSON messages to ``/initialize`` and
    ``/register-citation`` and decodes the JSON replies.

    Attributes:
        base_url: Base URL of the formatting service
        timeout: Request timeout in seconds

    Example:
        >>> engine = HttpFormattingEngine(base_url="http://localhost:8090")
        >>> response = await engine.initialize(request)
        >>> await engine.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = Timeouts.ENGINE_REQUEST,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: Base URL of the formatting service
            timeout: Request timeout in seconds
            client: Pre-built client (tests pass one with a MockTransport)
        """
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=Timeouts.ENGINE_CONNECT),
            )
            await asyncio.sleep(0)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(
        self,
        operation: str,
        endpoint: str,
        payload: dict[str, Any],
        response_model: type[ResponseT],
    ) -> ResponseT:
        client = await self._get_client()
        try:
            response = await client.post(endpoint, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise EngineTimeoutError(
                f"Formatting engine timed out on {operation}",
                operation=operation,
                timeout_seconds=self.timeout,
                cause=e,
            ) from e
        except httpx.HTTPStatusError as e:
            raise EngineConnectionError(
                f"Formatting engine returned {e.response.status_code} on {operation}",
                operation=operation,
                status_code=e.response.status_code,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise EngineConnectionError(
                f"Formatting engine unreachable on {operation}: {e}",
                operation=operation,
                cause=e,
            ) from e

        try:
            return response_model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed engine response", operation=operation, error=str(e))
            raise EngineProtocolError(
                f"Malformed {operation} response from formatting engine",
                operation=operation,
                cause=e,
            ) from e

    async def initialize(self, request: InitializeRequest) -> InitializeResponse:
        return await self._post(
            "initialize",
            ENDPOINT_INITIALIZE,
            request.to_wire(),
            InitializeResponse,
        )

    async def register_citation(
        self, request: RegisterCitationRequest
    ) -> RegisterCitationResponse:
        return await self._post(
            "registerCitation",
            ENDPOINT_REGISTER_CITATION,
            request.to_wire(),
            RegisterCitationResponse,
        )

    def __repr__(self) -> str:
        return f"HttpFormattingEngine(base_url={self.base_url!r}, timeout={self.timeout})"


__all__ = ["FormattingEngineTransport", "HttpFormattingEngine"]
