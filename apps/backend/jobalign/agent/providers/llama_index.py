"""
Completions through any LlamaIndex LLM integration.

Set ``LLM_PROVIDER`` to the dotted class path, for example
``llama_index.llms.anthropic.Anthropic`` or ``llama_index.llms.openai.OpenAI``.
The class is constructed with ``model``, ``api_key`` and optionally
``base_url``, ``temperature`` and ``max_tokens``; integrations that reject
``model`` get ``model_name`` instead.
"""

import logging
from importlib import import_module
from typing import Any, Dict, Optional

from llama_index.core.base.llms.base import BaseLLM

from ..exceptions import EmptyCompletionError, ProviderError
from .base import Provider
from ...core import settings

logger = logging.getLogger(__name__)


def load_llm_class(class_path: str) -> type:
    """Import ``package.module.ClassName`` and check it is a LlamaIndex LLM."""
    if not isinstance(class_path, str) or not class_path:
        raise ValueError("LLM provider must be a fully-qualified class name")
    module_name, _, class_name = class_path.rpartition(".")
    if not module_name:
        raise ValueError(f"'{class_path}' is not a dotted class path")
    llm_class = getattr(import_module(module_name), class_name)
    if not isinstance(llm_class, type) or not issubclass(llm_class, BaseLLM):
        raise TypeError(f"{class_path} is not a llama_index.core BaseLLM subclass")
    return llm_class


class LlamaIndexProvider(Provider):
    def __init__(self,
                 api_key: Optional[str] = settings.LLM_API_KEY,
                 api_base_url: Optional[str] = settings.LLM_BASE_URL,
                 model_name: str = settings.LL_MODEL,
                 provider: str = settings.LLM_PROVIDER,
                 opts: Optional[Dict[str, Any]] = None):
        self.opts = opts or {}
        self.model = model_name
        llm_class = load_llm_class(provider)
        self._name = llm_class.__name__
        self._client = self._build_client(llm_class, api_key, api_base_url)

    def _constructor_kwargs(self, api_key: Optional[str], api_base_url: Optional[str]) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"model": self.model, "api_key": api_key}
        if api_base_url:
            kwargs["base_url"] = api_base_url
        for key in ("temperature", "max_tokens"):
            if self.opts.get(key) is not None:
                kwargs[key] = self.opts[key]
        return kwargs

    def _build_client(self, llm_class: type, api_key: Optional[str], api_base_url: Optional[str]) -> BaseLLM:
        kwargs = self._constructor_kwargs(api_key, api_base_url)
        try:
            return llm_class(**kwargs)
        except TypeError as e:
            if "unexpected keyword argument" not in str(e) and "model" not in str(e):
                raise
            logger.debug(f"{self._name} rejected 'model', retrying with 'model_name'")
            kwargs["model_name"] = kwargs.pop("model")
            return llm_class(**kwargs)

    async def __call__(self, prompt: str, **generation_args: Any) -> str:
        if generation_args:
            logger.warning(f"LlamaIndexProvider ignoring generation_args: {generation_args}")
        try:
            completion = await self._client.acomplete(prompt)
        except Exception as e:
            logger.error(f"{self._name} completion failed: {e}")
            raise ProviderError(f"{self._name} - Error generating response: {e}") from e
        text = (completion.text or "").strip()
        if not text:
            raise EmptyCompletionError(f"{self._name} returned an empty completion")
        return text
