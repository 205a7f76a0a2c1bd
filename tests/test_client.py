from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from speakright.client import AnalysisClient, AnalysisRequestError

CONTENT = {
    "ipa": "ðə kwɪk",
    "goodPronunciation": [{"word": "the", "ipa": "ðə"}],
    "needsImprovement": [],
    "tips": ["Keep going"],
}


def test_analyze_posts_camel_case_payload() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"content": CONTENT, "targetText": "The quick"})

    client = AnalysisClient(base_url="http://gateway.test/", transport=httpx.MockTransport(handler))
    response = asyncio.run(client.analyze(spoken_text="the quick", target_text=""))

    assert seen["path"] == "/api/analyze"
    assert seen["body"] == {"targetText": "", "spokenText": "the quick"}
    assert response.target_text == "The quick"
    assert response.content.good_pronunciation[0].ipa == "ðə"
    assert response.content.tips == ["Keep going"]


def test_analyze_error_carries_details() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Failed", "details": "API Authentication failed"})

    client = AnalysisClient(base_url="http://gateway.test", transport=httpx.MockTransport(handler))
    with pytest.raises(AnalysisRequestError) as excinfo:
        asyncio.run(client.analyze(spoken_text="hello"))

    assert excinfo.value.status_code == 500
    assert excinfo.value.details == "API Authentication failed"


def test_analyze_connection_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = AnalysisClient(base_url="http://gateway.test", transport=httpx.MockTransport(handler))
    with pytest.raises(AnalysisRequestError, match="Analysis failed"):
        asyncio.run(client.analyze(spoken_text="hello"))


def test_analyze_error_with_non_object_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, json=["bad gateway"])

    client = AnalysisClient(base_url="http://gateway.test", transport=httpx.MockTransport(handler))
    with pytest.raises(AnalysisRequestError) as excinfo:
        asyncio.run(client.analyze(spoken_text="hello"))

    assert excinfo.value.status_code == 502
    assert "bad gateway" in excinfo.value.details
