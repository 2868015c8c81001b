"""
Consult-scribe backend package.

Design intent:
- Host the consultation recorder service under a clean backend skeleton.
- Keep the transcript reconciliation engine independent from transport and I/O.
"""
