"""
Configuration Management Module

Handles configuration loading from environment variables and an optional
YAML settings file.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional, List

import yaml
from dotenv import load_dotenv


PROVIDER_KEYS = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GOOGLE_API_KEY",
}

DEFAULT_MODELS = {
    "openai": {"embedding": "text-embedding-ada-002", "chat": "gpt-4"},
    "gemini": {"embedding": "text-embedding-004", "chat": "gemini-2.5-pro"},
}

# Non-secret settings that may be overridden from the YAML file
TUNABLES = {
    "batch_size": int,
    "top_k": int,
    "retry_attempts": int,
    "retry_delay": float,
    "ingest_workers": int,
    "request_timeout": float,
    "embedding_model": str,
    "chat_model": str,
    "system_prompt_path": str,
    "log_level": str,
}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings_file(path: Optional[str]) -> Dict[str, Any]:
    """Load the optional YAML settings overlay. Missing file yields {}."""
    if not path:
        return {}

    settings_path = Path(path)
    if not settings_path.exists():
        return {}

    with open(settings_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Settings file {settings_path} must contain a mapping")
    return data


class Config:
    """Configuration manager for RFP Assistant."""

    def __init__(self, env_file: Optional[str] = None, settings_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            env_file: Path to .env file (defaults to .env in current directory)
            settings_file: Path to YAML settings overlay (defaults to RFP_SETTINGS_FILE)
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        self.pinecone_api_key = os.getenv("PINECONE_API_KEY", "")
        self.pinecone_environment = os.getenv("PINECONE_ENVIRONMENT", "")
        self.pinecone_index_name = os.getenv("PINECONE_INDEX_NAME", "")
        self.pinecone_host = os.getenv("PINECONE_HOST", "")
        self.pinecone_verify_ssl = _env_flag("PINECONE_VERIFY_SSL", default=False)
        self.pinecone_client = os.getenv("PINECONE_CLIENT", "sdk").lower()

        self.llm_provider = os.getenv("LLM_PROVIDER", "openai").lower()
        self.openai_api_key = os.getenv("OPENAI_API_KEY", "")
        self.google_api_key = os.getenv("GOOGLE_API_KEY", "")

        models = DEFAULT_MODELS.get(self.llm_provider, DEFAULT_MODELS["openai"])
        self.embedding_model = os.getenv("EMBEDDING_MODEL", models["embedding"])
        self.chat_model = os.getenv("CHAT_MODEL", models["chat"])

        self.batch_size = int(os.getenv("BATCH_SIZE", "10"))
        self.top_k = int(os.getenv("TOP_K", "5"))
        self.retry_attempts = int(os.getenv("RETRY_ATTEMPTS", "3"))
        self.retry_delay = float(os.getenv("RETRY_DELAY", "1.0"))
        self.ingest_workers = int(os.getenv("INGEST_WORKERS", "1"))
        self.request_timeout = float(os.getenv("REQUEST_TIMEOUT", "30"))
        self.system_prompt_path = os.getenv("SYSTEM_PROMPT_PATH", "")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        overlay = load_settings_file(settings_file or os.getenv("RFP_SETTINGS_FILE"))
        for key, cast in TUNABLES.items():
            if key in overlay and overlay[key] is not None:
                setattr(self, key, cast(overlay[key]))
        self.log_level = self.log_level.upper()

    @property
    def llm_api_key(self) -> str:
        """API key of the configured LLM provider."""
        if self.llm_provider == "gemini":
            return self.google_api_key
        return self.openai_api_key

    @property
    def pinecone_base_url(self) -> str:
        """Index data-plane URL, preferring an explicit PINECONE_HOST."""
        if self.pinecone_host:
            if self.pinecone_host.startswith("http"):
                return self.pinecone_host.rstrip("/")
            return f"https://{self.pinecone_host}".rstrip("/")
        return f"https://{self.pinecone_index_name}.svc.{self.pinecone_environment}.pinecone.io"

    def missing_variables(self) -> List[str]:
        """Names of required environment variables that are not set."""
        required = {
            "PINECONE_API_KEY": self.pinecone_api_key,
            "PINECONE_ENVIRONMENT": self.pinecone_environment,
            "PINECONE_INDEX_NAME": self.pinecone_index_name,
        }
        key_name = PROVIDER_KEYS.get(self.llm_provider)
        if key_name:
            required[key_name] = self.llm_api_key
        return [name for name, value in required.items() if not value]

    def validate(self) -> bool:
        """
        Validate that required configuration is present.

        Returns:
            True if valid, raises ValueError otherwise
        """
        if self.llm_provider not in PROVIDER_KEYS:
            raise ValueError(
                f"Unknown LLM_PROVIDER '{self.llm_provider}'. "
                f"Expected one of: {', '.join(PROVIDER_KEYS)}"
            )
        if self.pinecone_client not in ("sdk", "http"):
            raise ValueError(f"Unknown PINECONE_CLIENT '{self.pinecone_client}'. Expected 'sdk' or 'http'")

        missing = self.missing_variables()
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (secrets reported by presence only)."""
        return {
            "pinecone_api_key_set": bool(self.pinecone_api_key),
            "pinecone_environment": self.pinecone_environment,
            "pinecone_index_name": self.pinecone_index_name,
            "pinecone_host_set": bool(self.pinecone_host),
            "pinecone_verify_ssl": self.pinecone_verify_ssl,
            "pinecone_client": self.pinecone_client,
            "llm_provider": self.llm_provider,
            "llm_api_key_set": bool(self.llm_api_key),
            "embedding_model": self.embedding_model,
            "chat_model": self.chat_model,
            "batch_size": self.batch_size,
            "top_k": self.top_k,
            "retry_attempts": self.retry_attempts,
            "retry_delay": self.retry_delay,
            "ingest_workers": self.ingest_workers,
            "request_timeout": self.request_timeout,
        }
