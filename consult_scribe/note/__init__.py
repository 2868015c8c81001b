"""
Note module boundary for the consult-scribe backend.

Design intent:
- Hand finished transcripts to the external note-generation workflow.
- Keep webhook transport details out of the recording controller.
"""
from __future__ import annotations
