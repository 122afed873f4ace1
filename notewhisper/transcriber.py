"""Remote speech-to-text client."""

from __future__ import annotations

import logging
import mimetypes
from typing import Dict, Optional

import httpx

from .models import Settings
from .remote import RemoteError, build_client, post, request_strategy


class TranscriptionClient:
    """Send audio to the configured transcription endpoint."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = build_client(self.settings)
        return self._client

    def transcribe(self, data: bytes, filename: str) -> str:
        strategy = request_strategy(self.settings)
        fields: Dict[str, str] = {"model": self.settings.model}
        if self.settings.language:
            fields["language"] = self.settings.language
        if self.settings.prompt:
            fields["prompt"] = self.settings.prompt

        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        logging.debug("Uploading %s (%d bytes) to %s", filename, len(data), self.settings.api_url)
        response = post(
            self.client,
            self.settings.api_url,
            headers=strategy.headers(),
            data=fields,
            files={"file": (filename, data, content_type)},
        )
        return _transcript_text(response)

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None


def _transcript_text(response: httpx.Response) -> str:
    if "json" not in response.headers.get("content-type", ""):
        return response.text.strip()
    try:
        payload = response.json()
    except ValueError as exc:
        raise RemoteError(f"Unexpected transcription response: {response.text[:200]}") from exc
    if not isinstance(payload, dict):
        raise RemoteError(f"Unexpected transcription response: {response.text[:200]}")
    return str(payload.get("text") or "").strip()
