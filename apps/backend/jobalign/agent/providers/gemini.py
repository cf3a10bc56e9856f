import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import EmptyCompletionError, ProviderError
from .base import Provider
from ...core import settings

logger = logging.getLogger(__name__)

GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(Provider):
    """Google Gemini provider talking to the ``generateContent`` REST endpoint."""

    def __init__(
        self,
        model_name: str = settings.LL_MODEL,
        api_key: Optional[str] = settings.LLM_API_KEY,
        api_base_url: Optional[str] = settings.LLM_BASE_URL,
        opts: Optional[Dict[str, Any]] = None,
        max_retries: int = settings.LLM_MAX_RETRIES,
        timeout: float = settings.LLM_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ProviderError("Gemini API key is missing; set GEMINI_API_KEY or LLM_API_KEY")
        self.opts = opts or {}
        self.model = model_name
        self._api_key = api_key
        self._base_url = (api_base_url or GEMINI_API_BASE_URL).rstrip("/")
        self._max_retries = max(0, max_retries)
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
        )

    def _payload(self, prompt: str) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {}
        if self.opts.get("temperature") is not None:
            generation_config["temperature"] = self.opts["temperature"]
        if self.opts.get("max_tokens") is not None:
            generation_config["maxOutputTokens"] = self.opts["max_tokens"]
        payload: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    @staticmethod
    def _extract_text(data: Any) -> str:
        if not isinstance(data, dict):
            raise ProviderError(f"Gemini - Unexpected response body of type {type(data).__name__}")
        candidates = data.get("candidates") or []
        if not isinstance(candidates, list):
            raise ProviderError("Gemini - 'candidates' is not a list")
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            raise EmptyCompletionError(f"Gemini returned no results (blocked/safety: {reason or 'no candidates'})")
        first = candidates[0]
        if not isinstance(first, dict):
            raise ProviderError("Gemini - Malformed candidate in response")
        content = first.get("content") or {}
        parts = (content.get("parts") or []) if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise ProviderError("Gemini - Malformed content parts in response")
        texts = [part.get("text") for part in parts if isinstance(part, dict)]
        text = "".join(t for t in texts if isinstance(t, str)).strip()
        if not text:
            raise EmptyCompletionError("Gemini returned an empty completion")
        return text

    async def _post_with_retries(self, path: str, payload: Dict[str, Any]) -> Any:
        base_delay = 1.0
        for attempt in range(self._max_retries + 1):
            try:
                response = await self._client.post(path, json=payload)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.error(f"Gemini HTTP error: status={status}, body={e.response.text[:300]}")
                if 400 <= status < 500 or attempt >= self._max_retries:
                    raise ProviderError(f"Gemini - HTTP {status} error generating response") from e
            except httpx.RequestError as e:
                logger.error(f"Gemini request error: {e!r}")
                if attempt >= self._max_retries:
                    raise ProviderError(f"Gemini - Request failed: {e!r}") from e
            except ValueError as e:
                raise ProviderError(f"Gemini - Invalid JSON in response: {e}") from e
            delay = base_delay * 2**attempt
            logger.warning(
                f"Gemini call failed, retrying in {delay:.1f}s "
                f"(attempt {attempt + 1}/{self._max_retries + 1})"
            )
            await asyncio.sleep(delay)
        raise ProviderError("Gemini - retries exhausted")

    async def __call__(self, prompt: str, **generation_args: Any) -> str:
        if generation_args:
            logger.warning(f"GeminiProvider ignoring generation_args {generation_args}")
        data = await self._post_with_retries(
            f"/models/{self.model}:generateContent", self._payload(prompt)
        )
        return self._extract_text(data)

    async def list_models(self) -> List[str]:
        """List the models available to this key that support ``generateContent``."""
        try:
            response = await self._client.get("/models")
            response.raise_for_status()
            body = response.json()
            models = body.get("models", []) if isinstance(body, dict) else []
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Gemini - HTTP {e.response.status_code} listing models") from e
        except (httpx.RequestError, ValueError) as e:
            raise ProviderError(f"Gemini - Error listing models: {e!r}") from e
        return [
            m["name"].replace("models/", "")
            for m in models
            if "generateContent" in m.get("supportedGenerationMethods", [])
        ]

    async def aclose(self) -> None:
        await self._client.aclose()
