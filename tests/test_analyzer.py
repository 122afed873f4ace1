import json

import httpx

from notewhisper.analyzer import SYSTEM_PROMPT, AnalysisClient
from notewhisper.models import Settings
from notewhisper.remote import AuthError, RemoteError


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_analyze_sends_fixed_two_message_payload():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["payload"] = json.loads(request.read())
        return httpx.Response(200, json=_completion("\nSummary\n- [ ] call Ana\n"))

    settings = Settings(api_key="sk-1")
    result = AnalysisClient(settings, client=_client(handler)).analyze("Remember to call Ana")

    assert result == "Summary\n- [ ] call Ana"
    assert seen["auth"] == "Bearer sk-1"
    payload = seen["payload"]
    assert payload["model"] == "gpt-4o-mini"
    assert payload["messages"] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Remember to call Ana"},
    ]
    assert payload["max_completion_tokens"] == 10000


def test_empty_completion_is_not_an_error():
    def handler(request):
        return httpx.Response(200, json=_completion(""))

    assert AnalysisClient(Settings(api_key="k"), client=_client(handler)).analyze("hi") == ""


def test_missing_key_and_bad_responses():
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    try:
        AnalysisClient(Settings(), client=_client(handler)).analyze("hi")
    except AuthError:
        pass
    else:
        raise AssertionError("Expected AuthError")

    try:
        AnalysisClient(Settings(api_key="k"), client=_client(handler)).analyze("hi")
    except RemoteError:
        pass
    else:
        raise AssertionError("Expected RemoteError for malformed body")


def test_server_error_raises_remote_error():
    def handler(request):
        return httpx.Response(503, text="overloaded")

    try:
        AnalysisClient(Settings(api_key="k"), client=_client(handler)).analyze("hi")
    except RemoteError as exc:
        assert exc.status_code == 503
        assert "overloaded" in str(exc)
    else:
        raise AssertionError("Expected RemoteError")
