"""
LLM Gateway Module

Embedding and chat-completion calls against the configured model provider.
OpenAI is the default provider; Gemini is supported as an alternative.
Failures propagate unchanged so callers can wrap them with with_retry.
"""

import logging
from typing import List, Optional

from google import genai
from google.genai import types
from openai import OpenAI

logger = logging.getLogger(__name__)


class LLMGateway:
    """Interface shared by the provider-specific gateways."""

    embedding_model: str
    chat_model: str

    def embed(self, text: str) -> List[float]:
        raise NotImplementedError

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        raise NotImplementedError


class OpenAIGateway(LLMGateway):
    """
    Calls the OpenAI embeddings and chat completions endpoints.
    """

    def __init__(self, api_key: str, embedding_model: str = "text-embedding-ada-002",
                 chat_model: str = "gpt-4", timeout: float = 30.0,
                 client: Optional[OpenAI] = None):
        """
        Initialize the OpenAI gateway.

        Args:
            api_key: OpenAI API key
            embedding_model: Model used for embeddings
            chat_model: Model used for answer generation
            timeout: Per-request deadline in seconds
            client: Pre-built client (tests)
        """
        if not api_key and client is None:
            raise ValueError("API key required. Set OPENAI_API_KEY env var or pass api_key.")

        self.client = client or OpenAI(api_key=api_key, timeout=timeout)
        self.embedding_model = embedding_model
        self.chat_model = chat_model

    def embed(self, text: str) -> List[float]:
        response = self.client.embeddings.create(
            model=self.embedding_model,
            input=text,
        )
        return list(response.data[0].embedding)

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.chat_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        return response.choices[0].message.content or ""


class GeminiGateway(LLMGateway):
    """
    Calls the Gemini embedding and generation APIs.
    """

    def __init__(self, api_key: str, embedding_model: str = "text-embedding-004",
                 chat_model: str = "gemini-2.5-pro", timeout: float = 30.0,
                 client: Optional[genai.Client] = None):
        if not api_key and client is None:
            raise ValueError("API key required. Set GOOGLE_API_KEY env var or pass api_key.")

        # HttpOptions.timeout is in milliseconds
        self.client = client or genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )
        self.embedding_model = embedding_model
        self.chat_model = chat_model

    def embed(self, text: str) -> List[float]:
        response = self.client.models.embed_content(
            model=self.embedding_model,
            contents=text,
        )
        return list(response.embeddings[0].values)

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        response = self.client.models.generate_content(
            model=self.chat_model,
            contents=user_prompt,
            config=types.GenerateContentConfig(system_instruction=system_prompt),
        )
        return (response.text or "").strip()


def create_llm_gateway(config) -> LLMGateway:
    """Build the gateway for config.llm_provider."""
    logger.info("Using %s models: embeddings=%s, chat=%s",
                config.llm_provider, config.embedding_model, config.chat_model)

    if config.llm_provider == "gemini":
        return GeminiGateway(
            api_key=config.google_api_key,
            embedding_model=config.embedding_model,
            chat_model=config.chat_model,
            timeout=config.request_timeout,
        )
    if config.llm_provider == "openai":
        return OpenAIGateway(
            api_key=config.openai_api_key,
            embedding_model=config.embedding_model,
            chat_model=config.chat_model,
            timeout=config.request_timeout,
        )
    raise ValueError(f"Unknown LLM provider: {config.llm_provider}")
