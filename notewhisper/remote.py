"""Shared HTTP plumbing for the transcription and analysis endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

import httpx

from .config import ConfigError
from .models import Settings


class AuthError(ConfigError):
    """Raised before any request when no API key is configured."""


class RemoteError(RuntimeError):
    """Raised when the remote endpoint fails or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class BearerRequest:
    """Direct API access: the key travels as a bearer token."""

    api_key: str

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}


@dataclass(frozen=True)
class GatewayRequest:
    """Access through a gateway that has its own Authorization scheme."""

    api_key: str
    auth_header: str

    def headers(self) -> Dict[str, str]:
        return {"Authorization": self.auth_header, "api-key": self.api_key}


RequestStrategy = Union[BearerRequest, GatewayRequest]


def request_strategy(settings: Settings) -> RequestStrategy:
    """Pick the request shape from the populated settings."""

    if not settings.api_key:
        raise AuthError("API key is missing. Set one with `notewhisper config --api-key ...`.")
    if settings.auth_header:
        return GatewayRequest(api_key=settings.api_key, auth_header=settings.auth_header)
    return BearerRequest(api_key=settings.api_key)


def build_client(settings: Settings) -> httpx.Client:
    return httpx.Client(timeout=settings.api_timeout, verify=settings.verify_ssl)


def error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        error = payload.get("error", payload.get("detail"))
        if isinstance(error, dict):
            return str(error.get("message", error))
        if error:
            return str(error)
    return response.text


def post(client: httpx.Client, url: str, **kwargs) -> httpx.Response:
    """POST and translate every failure into :class:`RemoteError`."""

    try:
        response = client.post(url, **kwargs)
    except httpx.HTTPError as exc:
        raise RemoteError(f"Request to {url} failed: {exc}") from exc
    if response.is_error:
        raise RemoteError(
            f"{response.status_code} from {url}: {error_detail(response)}",
            status_code=response.status_code,
        )
    return response
