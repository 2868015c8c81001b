from __future__ import annotations

import asyncio
from typing import Any, Optional

from .base import ConfigurationError, ErrorCallback, FinalCallback, PartialCallback, StreamError
from .relay import RelaySTTProvider


class MockSTTProvider(RelaySTTProvider):
    """Scripted recognizer: tests push events and choose how the stream closes."""

    def __init__(
        self,
        *,
        final_on_stop: Optional[Any] = None,
        final_delay_sec: float = 0.0,
        fail_on_start: bool = False,
        fail_on_stop: bool = False,
    ) -> None:
        super().__init__()
        self._final_on_stop = final_on_stop
        self._final_delay_sec = max(0.0, float(final_delay_sec))
        self._fail_on_start = fail_on_start
        self._fail_on_stop = fail_on_stop
        self.start_calls = 0
        self.stop_calls = 0

    async def start(
        self,
        *,
        on_partial: PartialCallback,
        on_final: FinalCallback,
        on_error: ErrorCallback,
    ) -> None:
        self.start_calls += 1
        if self._fail_on_start:
            raise ConfigurationError("MOCK_NOT_CONFIGURED", "mock recognizer not configured", self.name())
        await super().start(on_partial=on_partial, on_final=on_final, on_error=on_error)

    async def stop(self) -> None:
        self.stop_calls += 1
        await super().stop()
        if self._fail_on_stop:
            raise StreamError("MOCK_STOP_FAILED", "mock recognizer failed to stop", self.name())
        if self._final_on_stop is None:
            return
        loop = asyncio.get_running_loop()
        loop.call_later(self._final_delay_sec, self.push_final, self._final_on_stop)

    def name(self) -> str:
        return "mock"
