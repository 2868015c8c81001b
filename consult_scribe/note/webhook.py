from __future__ import annotations

"""
Forward a finished consultation transcript to the note-generation workflow.

Design intent:
- Treat the workflow as an opaque webhook: send transcript + session notes only.
- Parse the SOAP analysis when the workflow returns one; never fail the session
  when it does not.
"""

import json
import logging
import re
from typing import Any, Sequence

import httpx
from pydantic import ValidationError

from consult_scribe.internal_core.contracts import NoteAnalysis, SessionNote

logger = logging.getLogger(__name__)

_JSON_BLOCK_RE = re.compile(r"```json\s*\n(.*?)\n\s*```", flags=re.DOTALL)


class NoteWorkflowError(RuntimeError):
    pass


def format_session_notes(session_notes: Sequence[SessionNote] | None) -> list[str]:
    return [f"[{item.timestamp}] {item.note}" for item in (session_notes or [])]


def build_webhook_payload(transcription: str, session_notes: Sequence[SessionNote] | None) -> dict[str, Any]:
    return {
        "transcribe-input": transcription,
        "medical-notes": format_session_notes(session_notes),
        "domain-knowledge": "",
    }


def parse_analysis_output(body: Any) -> NoteAnalysis | None:
    if not isinstance(body, dict):
        return None
    output = body.get("output")
    if not isinstance(output, str):
        return None
    match = _JSON_BLOCK_RE.search(output)
    if not match:
        return None
    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise NoteWorkflowError(f"Invalid analysis JSON: {exc}") from exc
    try:
        return NoteAnalysis.model_validate(data)
    except ValidationError as exc:
        raise NoteWorkflowError(f"Invalid analysis schema: {exc.error_count()} errors") from exc


class NoteWorkflowClient:
    def __init__(
        self,
        url: str,
        token: str = "",
        *,
        timeout_sec: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._token = token
        self._timeout_sec = float(timeout_sec)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def request_analysis(
        self,
        transcription: str,
        session_notes: Sequence[SessionNote] | None = None,
    ) -> NoteAnalysis | None:
        payload = build_webhook_payload(transcription, session_notes)
        async with httpx.AsyncClient(timeout=self._timeout_sec, transport=self._transport) as client:
            resp = await client.post(self._url, headers=self._headers(), json=payload)
        if resp.status_code >= 400:
            raise NoteWorkflowError(f"Note workflow responded with status: {resp.status_code}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise NoteWorkflowError("Note workflow returned a non-JSON body") from exc
        return parse_analysis_output(body)

    async def send(
        self,
        transcription: str,
        session_notes: Sequence[SessionNote] | None = None,
    ) -> NoteAnalysis | None:
        try:
            analysis = await self.request_analysis(transcription, session_notes)
        except (httpx.HTTPError, NoteWorkflowError) as exc:
            logger.warning("note workflow request failed error=%s", exc)
            return None
        if analysis is None:
            logger.info("note workflow returned no analysis block")
        return analysis
