"""
API orchestration boundary for the consult-scribe backend.

Design intent:
- Expose thin, typed endpoints for the recording session lifecycle.
- Relay browser-side recognizer results into the transcript engine.
- Keep request validation explicit and failure modes predictable.
"""
