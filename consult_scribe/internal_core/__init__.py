from .config import ScribeConfig, load_config
from .session_store import InMemoryRecordingStore

__all__ = ["ScribeConfig", "load_config", "InMemoryRecordingStore"]
