"""Summaries and task lists for transcripts via a chat completion endpoint."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from .models import Settings
from .remote import RemoteError, build_client, post, request_strategy

SYSTEM_PROMPT = (
    "You are a helpful assistant that analyses transcribed voice notes. "
    "I will provide you with a transcription; please perform the following tasks:\n"
    "1. Briefly summarise the transcription.\n"
    "2. List all the tasks for me to do. If there are no tasks, skip this step.\n"
    "Answer in the language of the transcription."
)


class AnalysisClient:
    """Ask a chat model for a summary and action items."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = build_client(self.settings)
        return self._client

    def build_payload(self, transcript: str) -> Dict[str, Any]:
        return {
            "model": self.settings.analysis_model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": transcript},
            ],
            "response_format": {"type": "text"},
            "temperature": 1,
            "max_completion_tokens": 10000,
            "top_p": 1,
            "frequency_penalty": 0,
            "presence_penalty": 0,
        }

    def analyze(self, transcript: str) -> str:
        strategy = request_strategy(self.settings)
        response = post(
            self.client,
            self.settings.analysis_url,
            headers=strategy.headers(),
            json=self.build_payload(transcript),
        )
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise RemoteError(f"Unexpected analysis response: {response.text[:200]}") from exc
        return (content or "").strip()

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
