from .exceptions import EmptyCompletionError, ProviderError, ProviderTimeoutError
from .manager import AgentManager

__all__ = [
    "AgentManager",
    "EmptyCompletionError",
    "ProviderError",
    "ProviderTimeoutError",
]
