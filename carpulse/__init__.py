"""Async client for the CarPulse chat/session backend."""

from carpulse.client import CarPulseClient
from carpulse.core.errors import (
    APIError,
    CarPulseError,
    MessageValidationError,
    StreamingUnsupportedError,
)
from carpulse.main import create_client
from carpulse.schemas import InlineData

__all__ = [
    "APIError",
    "CarPulseClient",
    "CarPulseError",
    "InlineData",
    "MessageValidationError",
    "StreamingUnsupportedError",
    "create_client",
]
