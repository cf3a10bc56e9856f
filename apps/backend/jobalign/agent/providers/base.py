from abc import ABC, abstractmethod
from typing import Any


class Provider(ABC):
    """
    Abstract base class for completion providers.

    A provider turns a prompt into the raw completion text. Implementations
    raise ``ProviderError`` on any failure.
    """

    @abstractmethod
    async def __call__(self, prompt: str, **generation_args: Any) -> str: ...

    async def aclose(self) -> None:
        """Release network resources held by the provider, if any."""
