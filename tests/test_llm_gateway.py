"""Unit tests for the LLM gateways."""

import sys
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest

from rfp_assistant.llm_gateway import GeminiGateway, OpenAIGateway, create_llm_gateway


def llm_config(**overrides):
    values = {
        "llm_provider": "openai",
        "openai_api_key": "sk-test",
        "google_api_key": "g-key",
        "embedding_model": "text-embedding-ada-002",
        "chat_model": "gpt-4",
        "request_timeout": 30.0,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class TestOpenAIGateway:

    @pytest.fixture
    def client(self):
        client = Mock()
        client.embeddings.create.return_value = SimpleNamespace(
            data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3])]
        )
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Yes, via SAML."))]
        )
        return client

    def test_embed_uses_configured_model(self, client):
        gateway = OpenAIGateway(api_key="sk-test", client=client)

        assert gateway.embed("Do you support SSO?") == [0.1, 0.2, 0.3]
        client.embeddings.create.assert_called_once_with(
            model="text-embedding-ada-002", input="Do you support SSO?"
        )

    def test_complete_sends_system_and_user_messages(self, client):
        gateway = OpenAIGateway(api_key="sk-test", chat_model="gpt-4", client=client)

        answer = gateway.complete("Be brief.", "Question: SSO?")

        assert answer == "Yes, via SAML."
        client.chat.completions.create.assert_called_once_with(
            model="gpt-4",
            messages=[
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "Question: SSO?"},
            ],
        )

    def test_errors_propagate(self, client):
        client.embeddings.create.side_effect = RuntimeError("quota exceeded")
        gateway = OpenAIGateway(api_key="sk-test", client=client)

        with pytest.raises(RuntimeError, match="quota exceeded"):
            gateway.embed("text")

    def test_requires_api_key(self):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            OpenAIGateway(api_key="")


class TestGeminiGateway:

    @pytest.fixture
    def client(self):
        client = Mock()
        client.models.embed_content.return_value = SimpleNamespace(
            embeddings=[SimpleNamespace(values=[0.5, 0.6])]
        )
        client.models.generate_content.return_value = SimpleNamespace(text="  Yes.  ")
        return client

    def test_embed_and_complete(self, client):
        gateway = GeminiGateway(api_key="g-key", client=client)

        assert gateway.embed("SSO?") == [0.5, 0.6]
        assert gateway.complete("Be brief.", "Question: SSO?") == "Yes."
        client.models.embed_content.assert_called_once_with(
            model="text-embedding-004", contents="SSO?"
        )
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-pro"
        assert kwargs["contents"] == "Question: SSO?"
        assert kwargs["config"].system_instruction == "Be brief."

    def test_empty_completion_text(self, client):
        client.models.generate_content.return_value = SimpleNamespace(text=None)

        assert GeminiGateway(api_key="g-key", client=client).complete("s", "u") == ""

    @patch("rfp_assistant.llm_gateway.genai")
    def test_client_gets_timeout_in_milliseconds(self, mock_genai):
        GeminiGateway(api_key="g-key", timeout=12.5)

        kwargs = mock_genai.Client.call_args.kwargs
        assert kwargs["api_key"] == "g-key"
        assert kwargs["http_options"].timeout == 12500

    def test_requires_api_key(self):
        with pytest.raises(ValueError, match="GOOGLE_API_KEY"):
            GeminiGateway(api_key="")

    def test_module_does_not_load_deprecated_sdk(self):
        import rfp_assistant.llm_gateway as module

        assert module.genai.__name__ == "google.genai"
        assert "google.generativeai" not in sys.modules


class TestCreateLLMGateway:

    @patch("rfp_assistant.llm_gateway.OpenAI")
    def test_openai(self, mock_openai):
        gateway = create_llm_gateway(llm_config())

        assert isinstance(gateway, OpenAIGateway)
        mock_openai.assert_called_once_with(api_key="sk-test", timeout=30.0)

    @patch("rfp_assistant.llm_gateway.genai")
    def test_gemini(self, mock_genai):
        gateway = create_llm_gateway(llm_config(
            llm_provider="gemini", embedding_model="text-embedding-004",
            chat_model="gemini-2.5-pro",
        ))

        assert isinstance(gateway, GeminiGateway)
        assert mock_genai.Client.call_args.kwargs["api_key"] == "g-key"

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            create_llm_gateway(llm_config(llm_provider="other"))
