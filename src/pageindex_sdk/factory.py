# src/pageindex_sdk/factory.py

from pageindex_sdk.observability.base import MetricsHook, NoOpMetricsHook

from .client import PageIndexClient
from .config import PageIndexConfig


def create_client(
    config: PageIndexConfig,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> PageIndexClient:
    """Create a PageIndex client from config.

    Args:
        config: Client configuration (API key, base URL, timeout).
        metrics_hook: Optional metrics hook for observability.

    Returns:
        Configured PageIndexClient.

    Raises:
        PageIndexError: If no API key is configured or found in the environment.

    Example:
        >>> config = PageIndexConfig(api_key="pi-...")
        >>> async with create_client(config) as client:
        ...     docs = await client.list_documents()
    """
    return PageIndexClient(
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.timeout,
        metrics_hook=metrics_hook,
    )
