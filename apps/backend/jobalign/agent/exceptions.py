class ProviderError(RuntimeError):
    """Raised when the underlying LLM provider fails"""


class ProviderTimeoutError(ProviderError):
    """Raised when the provider does not answer within the configured timeout.

    Callers treat it like any other provider failure; the subclass only exists
    so logs and degraded results can name the cause.
    """


class EmptyCompletionError(ProviderError):
    """Raised when the provider answers but the completion text is empty"""
