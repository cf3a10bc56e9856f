"""
Tests for the Gemini completion provider.

These tests verify:
1. The generateContent request carries the prompt, model and generation config
2. Candidate text parts are joined into the completion
3. Blocked / empty responses raise EmptyCompletionError
4. 4xx errors are not retried, 5xx and transport errors are retried then wrapped
5. Model listing filters on generateContent support
6. Malformed response bodies raise ProviderError, null text parts are skipped
"""

import json

import httpx
import pytest

from jobalign.agent.exceptions import EmptyCompletionError, ProviderError
from jobalign.agent.providers.gemini import GeminiProvider


def _ok(text: str) -> httpx.Response:
    return httpx.Response(
        200,
        json={"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]},
    )


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    """Skip the exponential backoff sleeps."""
    async def _sleep(_delay):
        return None

    monkeypatch.setattr("jobalign.agent.providers.gemini.asyncio.sleep", _sleep)


def make_provider(handler, **kwargs) -> GeminiProvider:
    return GeminiProvider(
        model_name="gemini-1.5-flash",
        api_key="test-key",
        api_base_url="https://gemini.test/v1beta",
        opts={"temperature": 0.4, "max_tokens": 512},
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestGeminiProvider:
    """Tests for GeminiProvider."""

    @pytest.mark.asyncio
    async def test_request_shape_and_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return _ok("SCORE: 80%")

        provider = make_provider(handler)
        text = await provider("analyze this")
        await provider.aclose()

        assert text == "SCORE: 80%"
        assert seen["url"] == "https://gemini.test/v1beta/models/gemini-1.5-flash:generateContent"
        assert seen["key"] == "test-key"
        assert seen["body"]["contents"][0]["parts"][0]["text"] == "analyze this"
        assert seen["body"]["generationConfig"] == {"temperature": 0.4, "maxOutputTokens": 512}

    @pytest.mark.asyncio
    async def test_multiple_parts_joined(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "SCORE: 80%\n"}, {"text": "MISSING: Go"}]}}]},
            )

        provider = make_provider(handler)
        assert await provider("p") == "SCORE: 80%\nMISSING: Go"

    @pytest.mark.asyncio
    async def test_no_candidates_is_empty_completion(self):
        def handler(request):
            return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

        provider = make_provider(handler)
        with pytest.raises(EmptyCompletionError) as exc_info:
            await provider("p")
        assert "SAFETY" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_blank_text_is_empty_completion(self):
        provider = make_provider(lambda request: _ok("   "))
        with pytest.raises(EmptyCompletionError):
            await provider("p")

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"error": {"message": "API key not valid"}})

        provider = make_provider(handler, max_retries=3)
        with pytest.raises(ProviderError) as exc_info:
            await provider("p")
        assert "HTTP 400" in str(exc_info.value)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_retried_then_succeeds(self):
        responses = iter([httpx.Response(503), _ok("SCORE: 61%")])
        provider = make_provider(lambda request: next(responses), max_retries=2)
        assert await provider("p") == "SCORE: 61%"

    @pytest.mark.asyncio
    async def test_server_error_exhausts_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        provider = make_provider(handler, max_retries=2)
        with pytest.raises(ProviderError) as exc_info:
            await provider("p")
        assert "HTTP 500" in str(exc_info.value)
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler, max_retries=1)
        with pytest.raises(ProviderError) as exc_info:
            await provider("p")
        assert "ConnectError" in str(exc_info.value)

    def test_missing_api_key(self):
        with pytest.raises(ProviderError):
            GeminiProvider(api_key=None)

    @pytest.mark.asyncio
    async def test_list_models(self):
        def handler(request):
            assert request.url.path == "/v1beta/models"
            return httpx.Response(200, json={"models": [
                {"name": "models/gemini-1.5-flash", "supportedGenerationMethods": ["generateContent"]},
                {"name": "models/text-embedding-004", "supportedGenerationMethods": ["embedContent"]},
            ]})

        provider = make_provider(handler)
        assert await provider.list_models() == ["gemini-1.5-flash"]

    @pytest.mark.parametrize(
        "body",
        [
            [{"candidates": []}],
            {"candidates": {"content": "not a list"}},
            {"candidates": ["plain string"]},
            {"candidates": [{"content": {"parts": "SCORE: 80%"}}]},
        ],
    )
    @pytest.mark.asyncio
    async def test_malformed_body_is_provider_error(self, body):
        provider = make_provider(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ProviderError):
            await provider("p")

    @pytest.mark.asyncio
    async def test_null_text_parts_are_skipped(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": None}, {"text": "SCORE: 55%"}]}}]},
            )

        provider = make_provider(handler)
        assert await provider("p") == "SCORE: 55%"

    @pytest.mark.asyncio
    async def test_only_null_text_is_empty_completion(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": None}]}}]})

        provider = make_provider(handler)
        with pytest.raises(EmptyCompletionError):
            await provider("p")

    @pytest.mark.asyncio
    async def test_candidate_without_content_is_empty_completion(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": [{"finishReason": "SAFETY"}]})

        provider = make_provider(handler)
        with pytest.raises(EmptyCompletionError):
            await provider("p")
