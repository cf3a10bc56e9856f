import logging
from typing import Any, Dict

from ..core import settings
from .exceptions import ProviderError
from .providers.base import Provider

logger = logging.getLogger(__name__)


class AgentManager:
    """
    Builds the completion provider named by ``LLM_PROVIDER`` and runs prompts on it.

    ``gemini`` and ``ollama`` are built in; any other value is treated as the
    dotted path of a LlamaIndex LLM class.
    """

    def __init__(self, model: str = settings.LL_MODEL, model_provider: str = settings.LLM_PROVIDER) -> None:
        self.model = model
        self.model_provider = (model_provider or "gemini").strip()

    def _generation_opts(self, overrides: Dict[str, Any]) -> Dict[str, Any]:
        # Providers take what they understand and ignore the rest.
        return {
            "temperature": settings.LLM_TEMPERATURE,
            "max_tokens": settings.LLM_MAX_TOKENS,
            **overrides,
        }

    async def _get_provider(self, **kwargs: Any) -> Provider:
        opts = self._generation_opts(kwargs)
        api_key = opts.pop("llm_api_key", settings.LLM_API_KEY)
        base_url = opts.pop("llm_base_url", settings.LLM_BASE_URL)
        match self.model_provider.lower():
            case "gemini":
                from .providers.gemini import GeminiProvider
                return GeminiProvider(model_name=self.model, api_key=api_key,
                                      api_base_url=base_url, opts=opts)
            case "ollama":
                from .providers.ollama import OllamaProvider
                return OllamaProvider(model_name=opts.pop("model", self.model),
                                      api_base_url=base_url, opts=opts)
            case _:
                from .providers.llama_index import LlamaIndexProvider
                return LlamaIndexProvider(api_key=api_key, api_base_url=base_url,
                                          model_name=self.model, provider=self.model_provider,
                                          opts=opts)

    async def get_provider(self, **kwargs: Any) -> Provider:
        """
        Build the configured provider.

        Configuration problems (missing key, unknown class path, missing
        integration package) surface as ``ProviderError`` like any other
        provider failure.
        """
        try:
            return await self._get_provider(**kwargs)
        except ProviderError:
            raise
        except (ImportError, AttributeError, ValueError, TypeError) as e:
            logger.error(f"Could not create provider '{self.model_provider}': {e}")
            raise ProviderError(f"Provider '{self.model_provider}' is misconfigured: {e}") from e

    async def run(self, prompt: str, **kwargs: Any) -> str:
        """Run the configured provider on ``prompt`` and return the raw completion."""
        provider = await self.get_provider(**kwargs)
        try:
            return await provider(prompt)
        finally:
            await provider.aclose()
