import logging
from typing import Any, Dict, Optional

import ollama
from fastapi.concurrency import run_in_threadpool

from ..exceptions import EmptyCompletionError, ProviderError
from .base import Provider
from ...core import settings

logger = logging.getLogger(__name__)


class OllamaProvider(Provider):
    """Completions from a local Ollama server. The model is pulled on first use if missing."""

    def __init__(
        self,
        model_name: str = settings.LL_MODEL,
        api_base_url: Optional[str] = settings.LLM_BASE_URL,
        opts: Optional[Dict[str, Any]] = None,
    ):
        self.opts = opts or {}
        self.model = model_name
        self._client = ollama.Client(host=api_base_url) if api_base_url else ollama.Client()
        self._require_model()

    def _has_model(self) -> bool:
        # "llama3" is installed as "llama3:latest"
        names = [m.model for m in self._client.list().models]
        return any(name == self.model or name.startswith(f"{self.model}:") for name in names)

    def _require_model(self) -> None:
        try:
            if self._has_model():
                return
        except Exception as e:
            logger.warning(f"Could not list Ollama models at startup: {e}")

        logger.info(f"Ollama model '{self.model}' not installed, pulling")
        try:
            self._client.pull(self.model)
        except Exception as e:
            logger.error(f"Pulling Ollama model '{self.model}' failed: {e}")
            raise ProviderError(
                f"Ollama model '{self.model}' is not available; "
                f"run 'ollama pull {self.model}' and restart. Cause: {e}"
            ) from e

    def _complete(self, prompt: str) -> str:
        options = {
            "temperature": self.opts.get("temperature"),
            "num_predict": self.opts.get("max_tokens"),
        }
        try:
            response = self._client.generate(
                model=self.model,
                prompt=prompt,
                options={k: v for k, v in options.items() if v is not None},
            )
        except ollama.ResponseError as e:
            logger.error(f"Ollama returned status {e.status_code}: {e}")
            raise ProviderError(f"Ollama - Error generating response: {e}") from e
        except Exception as e:
            logger.error(f"Ollama request failed: {e}")
            raise ProviderError(f"Ollama - Error generating response: {e}") from e
        text = (response["response"] or "").strip()
        if not text:
            raise EmptyCompletionError("Ollama returned an empty completion")
        return text

    async def __call__(self, prompt: str, **generation_args: Any) -> str:
        if generation_args:
            logger.warning(f"OllamaProvider ignoring generation_args {generation_args}")
        return await run_in_threadpool(self._complete, prompt)
