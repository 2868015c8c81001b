from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _getenv_list(name: str, default: str) -> tuple[str, ...]:
    raw = _getenv_str(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def validate_api_key(api_key: Optional[str]) -> bool:
    return bool(api_key and api_key.strip())


@dataclass(frozen=True)
class ScribeConfig:
    SCRIBE_STT_PROVIDER: str
    SCRIBE_STT_API_KEY: str
    SCRIBE_STT_MODEL: str
    SCRIBE_STT_DIARIZATION: bool
    SCRIBE_STT_LANGUAGE_ID: bool
    SCRIBE_STT_LANGUAGE_HINTS: tuple[str, ...]
    SCRIBE_RECENCY_WINDOW: int
    SCRIBE_FINISH_TIMEOUT_SECONDS: float
    SCRIBE_NOTE_WEBHOOK_URL: str
    SCRIBE_NOTE_WEBHOOK_TOKEN: str
    SCRIBE_NOTE_WEBHOOK_TIMEOUT_SECONDS: float
    SCRIBE_MAX_RECORDINGS: int
    SCRIBE_LOG_LEVEL: str

    @property
    def stt_configured(self) -> bool:
        if self.SCRIBE_STT_PROVIDER == "mock":
            return True
        return validate_api_key(self.SCRIBE_STT_API_KEY)

    @property
    def note_webhook_enabled(self) -> bool:
        return bool(self.SCRIBE_NOTE_WEBHOOK_URL.strip())


def load_config() -> ScribeConfig:
    return ScribeConfig(
        SCRIBE_STT_PROVIDER=_getenv_str("SCRIBE_STT_PROVIDER", "relay").strip().lower(),
        SCRIBE_STT_API_KEY=_getenv_str("SCRIBE_STT_API_KEY", ""),
        SCRIBE_STT_MODEL=_getenv_str("SCRIBE_STT_MODEL", "stt-rt-preview-v2"),
        SCRIBE_STT_DIARIZATION=_getenv_bool("SCRIBE_STT_DIARIZATION", True),
        SCRIBE_STT_LANGUAGE_ID=_getenv_bool("SCRIBE_STT_LANGUAGE_ID", True),
        SCRIBE_STT_LANGUAGE_HINTS=_getenv_list("SCRIBE_STT_LANGUAGE_HINTS", "en,ms,zh,ta"),
        SCRIBE_RECENCY_WINDOW=max(1, _getenv_int("SCRIBE_RECENCY_WINDOW", 2)),
        SCRIBE_FINISH_TIMEOUT_SECONDS=max(0.0, _getenv_float("SCRIBE_FINISH_TIMEOUT_SECONDS", 1.0)),
        SCRIBE_NOTE_WEBHOOK_URL=_getenv_str("SCRIBE_NOTE_WEBHOOK_URL", ""),
        SCRIBE_NOTE_WEBHOOK_TOKEN=_getenv_str("SCRIBE_NOTE_WEBHOOK_TOKEN", ""),
        SCRIBE_NOTE_WEBHOOK_TIMEOUT_SECONDS=_getenv_float("SCRIBE_NOTE_WEBHOOK_TIMEOUT_SECONDS", 30.0),
        SCRIBE_MAX_RECORDINGS=max(1, _getenv_int("SCRIBE_MAX_RECORDINGS", 200)),
        SCRIBE_LOG_LEVEL=_getenv_str("SCRIBE_LOG_LEVEL", "INFO"),
    )
