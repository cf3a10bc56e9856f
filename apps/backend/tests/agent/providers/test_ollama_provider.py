"""
Tests for the Ollama completion provider.

These tests verify:
1. Successful generation returns the stripped completion text
2. Ollama ResponseError is properly caught and wrapped as ProviderError
3. Empty responses raise EmptyCompletionError
4. Missing models are pulled, and an unavailable model raises ProviderError
"""

import pytest
from unittest.mock import MagicMock, patch


class TestOllamaProvider:
    """Tests for OllamaProvider."""

    @pytest.fixture
    def mock_ollama_client(self):
        """Create a mock Ollama client."""
        client = MagicMock()
        mock_model = MagicMock()
        mock_model.model = "llama3:latest"
        client.list.return_value.models = [mock_model]
        return client

    @pytest.fixture
    def provider_with_mock_client(self, mock_ollama_client):
        """Create an OllamaProvider with a mocked client."""
        with patch('jobalign.agent.providers.ollama.ollama.Client', return_value=mock_ollama_client):
            from jobalign.agent.providers.ollama import OllamaProvider
            provider = OllamaProvider(model_name="llama3", opts={"temperature": 0.2, "max_tokens": 256})
            return provider, mock_ollama_client

    @pytest.mark.asyncio
    async def test_generate_success(self, provider_with_mock_client):
        provider, mock_client = provider_with_mock_client
        mock_client.generate.return_value = {"response": "  SCORE: 70%\nMISSING: Go  "}

        result = await provider("prompt text")

        assert result == "SCORE: 70%\nMISSING: Go"
        kwargs = mock_client.generate.call_args.kwargs
        assert kwargs["model"] == "llama3"
        assert kwargs["options"] == {"temperature": 0.2, "num_predict": 256}

    @pytest.mark.asyncio
    async def test_response_error_wrapped(self, provider_with_mock_client):
        provider, mock_client = provider_with_mock_client

        from ollama import ResponseError
        from jobalign.agent.exceptions import ProviderError

        mock_client.generate.side_effect = ResponseError("model crashed", status_code=500)

        with pytest.raises(ProviderError) as exc_info:
            await provider("prompt text")

        assert "model crashed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_response(self, provider_with_mock_client):
        provider, mock_client = provider_with_mock_client

        from jobalign.agent.exceptions import EmptyCompletionError

        mock_client.generate.return_value = {"response": ""}

        with pytest.raises(EmptyCompletionError):
            await provider("prompt text")

    def test_pulls_missing_model(self, mock_ollama_client):
        mock_ollama_client.list.return_value.models = []
        with patch('jobalign.agent.providers.ollama.ollama.Client', return_value=mock_ollama_client):
            from jobalign.agent.providers.ollama import OllamaProvider
            OllamaProvider(model_name="mistral")
        mock_ollama_client.pull.assert_called_once_with("mistral")

    def test_unavailable_model_raises(self, mock_ollama_client):
        from jobalign.agent.exceptions import ProviderError

        mock_ollama_client.list.return_value.models = []
        mock_ollama_client.pull.side_effect = ConnectionError("offline")
        with patch('jobalign.agent.providers.ollama.ollama.Client', return_value=mock_ollama_client):
            from jobalign.agent.providers.ollama import OllamaProvider
            with pytest.raises(ProviderError) as exc_info:
                OllamaProvider(model_name="mistral")
        assert "ollama pull mistral" in str(exc_info.value)
