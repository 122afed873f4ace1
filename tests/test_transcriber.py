import httpx

from notewhisper.config import ConfigError
from notewhisper.models import Settings
from notewhisper.remote import AuthError, BearerRequest, GatewayRequest, RemoteError, request_strategy
from notewhisper.transcriber import TranscriptionClient


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_missing_api_key_fails_before_any_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"text": "nope"})

    client = TranscriptionClient(Settings(api_key=""), client=_client(handler))
    try:
        client.transcribe(b"audio", "clip.m4a")
    except ConfigError as exc:
        assert isinstance(exc, AuthError)
    else:
        raise AssertionError("Expected a ConfigError without an API key")
    assert calls == []


def test_bearer_request_sends_multipart_fields():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={"text": "  hello world \n"})

    settings = Settings(api_key="sk-1", language="en", prompt="Names: Ana")
    text = TranscriptionClient(settings, client=_client(handler)).transcribe(b"RIFFDATA", "clip.mp3")

    assert text == "hello world"
    assert seen["auth"] == "Bearer sk-1"
    assert seen["url"] == settings.api_url
    assert b'name="model"' in seen["body"]
    assert b"whisper-1" in seen["body"]
    assert b'name="prompt"' in seen["body"]
    assert b'filename="clip.mp3"' in seen["body"]
    assert b"RIFFDATA" in seen["body"]


def test_gateway_request_uses_custom_auth_header():
    seen = {}

    def handler(request):
        seen["authorization"] = request.headers["Authorization"]
        seen["api-key"] = request.headers.get("api-key")
        return httpx.Response(200, text="plain transcript")

    settings = Settings(api_key="sk-2", auth_header="Basic abc", api_url="https://gateway.local/stt")
    text = TranscriptionClient(settings, client=_client(handler)).transcribe(b"x", "a.m4a")

    assert text == "plain transcript"
    assert seen["authorization"] == "Basic abc"
    assert seen["api-key"] == "sk-2"


def test_strategy_selection():
    assert isinstance(request_strategy(Settings(api_key="k")), BearerRequest)
    assert isinstance(request_strategy(Settings(api_key="k", auth_header="Basic z")), GatewayRequest)


def test_error_status_raises_remote_error():
    def handler(request):
        return httpx.Response(401, json={"error": {"message": "Incorrect API key"}})

    client = TranscriptionClient(Settings(api_key="bad"), client=_client(handler))
    try:
        client.transcribe(b"x", "a.m4a")
    except RemoteError as exc:
        assert exc.status_code == 401
        assert "Incorrect API key" in str(exc)
    else:
        raise AssertionError("Expected RemoteError")


def test_transport_failure_raises_remote_error():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    client = TranscriptionClient(Settings(api_key="k"), client=_client(handler))
    try:
        client.transcribe(b"x", "a.m4a")
    except RemoteError as exc:
        assert exc.status_code is None
    else:
        raise AssertionError("Expected RemoteError")


def test_malformed_json_body_raises_remote_error():
    def handler(request):
        return httpx.Response(200, content=b"<html>oops", headers={"content-type": "application/json"})

    client = TranscriptionClient(Settings(api_key="k"), client=_client(handler))
    try:
        client.transcribe(b"x", "a.m4a")
    except RemoteError as exc:
        assert "Unexpected transcription response" in str(exc)
    else:
        raise AssertionError("Expected RemoteError for a malformed body")


def test_null_text_is_an_empty_transcript():
    def handler(request):
        return httpx.Response(200, json={"text": None})

    assert TranscriptionClient(Settings(api_key="k"), client=_client(handler)).transcribe(b"x", "a.m4a") == ""
