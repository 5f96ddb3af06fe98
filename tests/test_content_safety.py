import asyncio
import json

import httpx
import pytest

from shiftly.exceptions import ContentSafetyError
from shiftly.main import app
from shiftly.services.content_safety import (
    ContentSafetyClient,
    get_content_safety_client,
    is_violation,
)


def test_analyze_text_posts_to_text_analyze_with_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers["Ocp-Apim-Subscription-Key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"categoriesAnalysis": [{"category": "Hate", "severity": 2}]})

    client = ContentSafetyClient(
        "https://shiftly.cognitiveservices.azure.com/", "secret", transport=httpx.MockTransport(handler)
    )
    result = asyncio.run(client.analyze_text("hello"))

    assert seen["url"] == (
        "https://shiftly.cognitiveservices.azure.com/contentsafety/text:analyze?api-version=2023-10-01"
    )
    assert seen["key"] == "secret"
    assert seen["body"] == {"text": "hello"}
    assert result == [{"category": "Hate", "severity": 2}]


def test_analyze_text_raises_on_error_status():
    client = ContentSafetyClient(
        "https://safety.example.com",
        "secret",
        transport=httpx.MockTransport(lambda r: httpx.Response(429, json={"error": {"code": "TooMany"}})),
    )
    with pytest.raises(ContentSafetyError) as exc_info:
        asyncio.run(client.analyze_text("hello"))
    assert exc_info.value.status_code == 429
    assert exc_info.value.details == {"error": {"code": "TooMany"}}


@pytest.mark.parametrize(
    "categories, expected",
    [
        ([], False),
        ([{"category": "Hate", "severity": 0}, {"category": "Sexual", "severity": 1}], False),
        ([{"category": "Violence", "severity": 2}], True),
        ([{"category": "SelfHarm", "severity": "4"}], True),
        ([{"category": "Hate", "severity": "1"}], False),
        ([{"category": "Hate", "severity": None}], False),
    ],
)
def test_is_violation(categories, expected):
    assert is_violation(categories) is expected


def test_is_violation_custom_threshold():
    assert is_violation([{"category": "Hate", "severity": 2}], threshold=4) is False


def test_check_content_safety_requires_text(client):
    resp = client.post("/check-content-safety", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing text"}


def test_check_content_safety_returns_analysis(client):
    stub = ContentSafetyClient(
        "https://safety.example.com",
        "secret",
        transport=httpx.MockTransport(
            lambda r: httpx.Response(200, json={"categoriesAnalysis": [{"category": "Hate", "severity": 6}]})
        ),
    )
    app.dependency_overrides[get_content_safety_client] = lambda: stub

    resp = client.post("/check-content-safety", json={"text": "..."})

    assert resp.status_code == 200
    assert resp.json() == {
        "categoriesAnalysis": [{"category": "Hate", "severity": 6}],
        "flagged": True,
    }


def test_check_content_safety_provider_error(client):
    stub = ContentSafetyClient(
        "https://safety.example.com",
        "secret",
        transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")),
    )
    app.dependency_overrides[get_content_safety_client] = lambda: stub

    resp = client.post("/check-content-safety", json={"text": "hi"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Content Safety analysis failed"


def test_check_content_safety_is_rate_limited(client, monkeypatch):
    from shiftly import rate_limiter

    app.dependency_overrides[get_content_safety_client] = lambda: None
    monkeypatch.setattr(rate_limiter, "MEMORY_CACHE_SYNC_INTERVAL", 10_000)
    statuses = [client.post("/check-content-safety", json={}).status_code for _ in range(61)]
    assert statuses[:60] == [400] * 60
    assert statuses[60] == 429
