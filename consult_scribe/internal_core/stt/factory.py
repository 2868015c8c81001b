"""
Factory for recognition providers.

Usage:
    provider = create_stt_provider(cfg)   # uses SCRIBE_STT_PROVIDER

Raises ConfigurationError when the selected backend cannot be used, which the
recording controller turns into a degraded "no live transcription" session.
"""
from __future__ import annotations

from ..config import ScribeConfig
from .base import ConfigurationError, STTProvider
from .mock import MockSTTProvider
from .relay import RelaySTTProvider


def create_stt_provider(cfg: ScribeConfig) -> STTProvider:
    provider = cfg.SCRIBE_STT_PROVIDER
    if provider == "mock":
        return MockSTTProvider()
    if provider == "relay":
        if not cfg.stt_configured:
            raise ConfigurationError(
                "STT_NOT_CONFIGURED",
                "Speech recognition API key not configured",
                provider,
            )
        return RelaySTTProvider()
    raise ConfigurationError("STT_UNKNOWN_PROVIDER", f"Unknown STT provider: {provider}", provider)
