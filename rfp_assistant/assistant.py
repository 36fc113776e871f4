"""
Assistant Module

Wires configuration, gateways, the connectivity probe, the ingestion
pipeline and the query service together.
"""

import logging
from typing import Any, Dict, Optional

from rfp_assistant.config import Config
from rfp_assistant.ingestion import IngestionPipeline
from rfp_assistant.llm_gateway import LLMGateway, create_llm_gateway
from rfp_assistant.models import IngestionResult, QueryResult
from rfp_assistant.prompts import load_system_prompt
from rfp_assistant.query_service import RFPQueryService
from rfp_assistant.vector_store import (
    StoreAvailability,
    VectorStoreGateway,
    create_vector_store,
    probe_availability,
)

logger = logging.getLogger(__name__)


class RFPAssistant:
    """
    Ingestion and query entry points sharing one store and one LLM gateway.

    The store availability is decided once, when the assistant is built, and
    stays fixed for its lifetime.
    """

    def __init__(self, store: VectorStoreGateway, llm: LLMGateway,
                 availability: StoreAvailability, config: Optional[Config] = None,
                 system_prompt: Optional[str] = None):
        self.store = store
        self.llm = llm
        self.availability = availability

        settings = config.to_dict() if config else {}
        retry = {
            "max_attempts": settings.get("retry_attempts", 3),
            "initial_delay": settings.get("retry_delay", 1.0),
        }
        self.pipeline = IngestionPipeline(
            store, llm, availability,
            batch_size=settings.get("batch_size", 10),
            workers=settings.get("ingest_workers", 1),
            **retry,
        )
        query_kwargs = dict(retry, top_k=settings.get("top_k", 5))
        if system_prompt:
            query_kwargs["system_prompt"] = system_prompt
        self.query_service = RFPQueryService(store, llm, availability, **query_kwargs)

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "RFPAssistant":
        """
        Validate config, build gateways and probe the store once.

        Raises:
            ValueError: If required configuration is missing
        """
        config = config or Config()
        config.validate()

        logger.info("Environment check: %s", config.to_dict())
        llm = create_llm_gateway(config)
        store = create_vector_store(config)
        logger.info("Vector store strategy: %s", store.strategy)
        availability = probe_availability(store)

        return cls(
            store, llm, availability,
            config=config,
            system_prompt=load_system_prompt(config.system_prompt_path),
        )

    @property
    def mock_mode(self) -> bool:
        return self.availability is StoreAvailability.DEGRADED

    def process_excel_rfp(self, buffer: bytes, metadata: Dict[str, Any]) -> IngestionResult:
        return self.pipeline.process_excel_rfp(buffer, metadata)

    def query_rfp_data(self, question: str,
                       filters: Optional[Dict[str, Any]] = None) -> QueryResult:
        return self.query_service.query(question, filters)
