"""
Server-side endpoint for a recognizer SDK that runs in the browser.

Design intent:
- The browser owns microphone capture and the vendor streaming connection.
- Results are pushed here over the transcription WebSocket and forwarded to the
  session callbacks exactly as a native SDK would invoke them.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from .base import ErrorCallback, FinalCallback, PartialCallback, STTError, STTProvider

logger = logging.getLogger(__name__)


class RelaySTTProvider(STTProvider):
    def __init__(self) -> None:
        self._on_partial: Optional[PartialCallback] = None
        self._on_final: Optional[FinalCallback] = None
        self._on_error: Optional[ErrorCallback] = None
        self._started = False
        self._stopping = False

    @property
    def is_active(self) -> bool:
        return self._started

    async def start(
        self,
        *,
        on_partial: PartialCallback,
        on_final: FinalCallback,
        on_error: ErrorCallback,
    ) -> None:
        if self._started:
            raise STTError("ALREADY_STARTED", "Already recording", self.name())
        self._on_partial = on_partial
        self._on_final = on_final
        self._on_error = on_error
        self._started = True
        self._stopping = False
        logger.info("stt relay started provider=%s", self.name())

    async def stop(self) -> None:
        # Stay attached so a closing final result can still be delivered.
        self._stopping = True

    def push_partial(self, payload: Any) -> bool:
        if not self._started or self._stopping or self._on_partial is None:
            return False
        self._on_partial(payload)
        return True

    def push_final(self, payload: Any) -> bool:
        if not self._started or self._on_final is None:
            return False
        callback = self._on_final
        self._detach()
        callback(payload)
        return True

    def push_error(self, message: str) -> bool:
        if not self._started or self._on_error is None:
            return False
        callback = self._on_error
        self._detach()
        callback(message)
        return True

    def _detach(self) -> None:
        self._started = False
        self._stopping = False
        self._on_partial = None
        self._on_final = None
        self._on_error = None

    def name(self) -> str:
        return "relay"
