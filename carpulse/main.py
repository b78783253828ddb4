from typing import Optional

import httpx

from carpulse.client import CarPulseClient
from carpulse.core.config import Settings, get_settings
from carpulse.core.logging import configure_logging


def create_client(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> CarPulseClient:
    """
    Build and return a configured CarPulseClient.
    """
    settings = settings or get_settings()
    if settings.LOG_JSON:
        configure_logging(settings.LOG_LEVEL)

    return CarPulseClient(http_client=http_client, settings=settings)
