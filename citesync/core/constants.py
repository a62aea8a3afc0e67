"""Citation synchronization constants.

Provides centralized constants for:
- Default style and locale
- Persistence keys
- Formatting engine endpoints
- Timeout values
- Styles offered to the user
"""

from enum import Enum


# =============================================================================
# Formatting Defaults
# =============================================================================

DEFAULT_LOCALE: str = "en-US"
DEFAULT_STYLE: str = "american-medical-association"


# =============================================================================
# Persistence Keys
# =============================================================================

class StorageKey(str, Enum):
    """Keys under which citation state is persisted.

    The values match the names used by existing stored documents.
    """
    DEFAULT_LOCALE = "defaultLocale"
    DEFAULT_STYLE = "defaultStyle"
    CITATION_BY_INDEX = "citationByIndex"
    CITATION_ID_TO_POS = "citationIdToPos"


# =============================================================================
# Formatting Engine Endpoints
# =============================================================================

ENDPOINT_INITIALIZE: str = "/initialize"
ENDPOINT_REGISTER_CITATION: str = "/register-citation"


# =============================================================================
# Default Timeout Values
# =============================================================================

class Timeouts:
    """Default timeout values in seconds."""
    ENGINE_REQUEST: float = 30.0
    ENGINE_CONNECT: float = 5.0


# =============================================================================
# Available Styles
# =============================================================================

# Style ID -> menu title
AVAILABLE_STYLES: dict[str, str] = {
    "acm-sig-proceedings": "ACM Proceedings",
    "american-medical-association": "AMA",
    "chicago-author-date": "Chicago (author-date)",
    "jm-chicago-fullnote-bibliography": "Chicago (full note)",
    "din-1505-2-alphanumeric": "DIN-1505-2 (alpha)",
    "jm-indigobook": "JM Indigo",
    "jm-indigobook-law-review": "JM Indigo (L. Rev.)",
    "jm-oscola": "JM OSCOLA",
}
