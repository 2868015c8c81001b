from __future__ import annotations

from .base import (
    AlreadyRecordingError,
    ConfigurationError,
    NotRecordingError,
    STTError,
    STTProvider,
    StreamError,
)
from .controller import RecordingController
from .factory import create_stt_provider
from .mock import MockSTTProvider
from .relay import RelaySTTProvider

__all__ = [
    "AlreadyRecordingError",
    "ConfigurationError",
    "MockSTTProvider",
    "NotRecordingError",
    "RecordingController",
    "RelaySTTProvider",
    "STTError",
    "STTProvider",
    "StreamError",
    "create_stt_provider",
]
