from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

PartialCallback = Callable[[Any], None]
FinalCallback = Callable[[Any], None]
ErrorCallback = Callable[[str], None]


class STTError(RuntimeError):
    def __init__(self, code: str, message: str, provider_name: str):
        super().__init__(message)
        self.code = code
        self.message = message
        self.provider_name = provider_name


class ConfigurationError(STTError):
    """Recognition backend unavailable or not configured."""


class StreamError(STTError):
    """Recognition backend failed mid-session."""


class AlreadyRecordingError(RuntimeError):
    pass


class NotRecordingError(RuntimeError):
    pass


class STTProvider(ABC):
    @abstractmethod
    async def start(
        self,
        *,
        on_partial: PartialCallback,
        on_final: FinalCallback,
        on_error: ErrorCallback,
    ) -> None: ...

    @abstractmethod
    async def stop(self) -> None: ...

    @abstractmethod
    def name(self) -> str: ...
