# src/pageindex_sdk/config.py

from dataclasses import dataclass

DEFAULT_BASE_URL = "https://api.pageindex.ai"
API_KEY_ENV_VAR = "PAGEINDEX_API_KEY"


@dataclass(frozen=True)
class PageIndexConfig:
    """Configuration for the PageIndex client.

    Immutable. Explicit. The only environment lookup is the API key.
    """

    api_key: str | None = None  # Falls back to PAGEINDEX_API_KEY
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
