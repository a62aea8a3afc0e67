"""Formatting engine client and transports."""

from citesync.engine.client import FormattingEngineClient, rebuild_to_updates
from citesync.engine.transport import FormattingEngineTransport, HttpFormattingEngine


__all__ = [
    "FormattingEngineClient",
    "FormattingEngineTransport",
    "HttpFormattingEngine",
    "rebuild_to_updates",
]
