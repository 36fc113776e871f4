"""
Query Service Module

Answers questions about ingested RFPs: embeds the question, retrieves the
most similar records and asks the chat model to summarize them. The service
always returns a QueryResult; failures become a polite fallback answer.
"""

import json
import logging
import re
import time
from typing import Any, Callable, Dict, Optional

from rfp_assistant import prompts
from rfp_assistant.llm_gateway import LLMGateway
from rfp_assistant.models import QueryMatch, QueryResult, SourceContext
from rfp_assistant.retry import with_retry
from rfp_assistant.vector_store import StoreAvailability, VectorStoreGateway

logger = logging.getLogger(__name__)

GREETING_PATTERN = re.compile(r"^(hi|hello|hey|greetings|howdy)[\s.,!]*$", re.IGNORECASE)
DEFAULT_FILTER = {"category": {"$exists": True}}
TOP_K = 5


def is_greeting(question: str) -> bool:
    return bool(GREETING_PATTERN.match(question or ""))


def build_filter(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Translate caller filters into index filter conditions.

    An empty filter set means "category must exist"; otherwise category and
    sheetName are passed through as equality constraints.
    """
    if not filters:
        return dict(DEFAULT_FILTER)

    conditions = {}
    if filters.get("category"):
        conditions["category"] = filters["category"]
    if filters.get("sheetName"):
        conditions["sheetName"] = filters["sheetName"]
    return conditions


def decode_original_data(raw: Any) -> Dict[str, Any]:
    """Parse stored originalData JSON; anything unusable decodes to {}."""
    if not raw or not isinstance(raw, str):
        return {}
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("Error parsing originalData for match: %s", e)
        return {}
    return data if isinstance(data, dict) else {}


def to_source_context(match: QueryMatch) -> SourceContext:
    metadata = match.metadata or {}
    return SourceContext(
        text=metadata.get("text") or "",
        original_data=decode_original_data(metadata.get("originalData")),
        category=metadata.get("category") or "unknown",
        sheet_name=metadata.get("sheetName") or "unknown",
        similarity=match.score,
    )


class RFPQueryService:
    """Retrieval-augmented answers over the RFP index."""

    def __init__(self, store: VectorStoreGateway, llm: LLMGateway,
                 availability: StoreAvailability = StoreAvailability.CONNECTED,
                 top_k: int = TOP_K, system_prompt: str = prompts.SYSTEM_PROMPT,
                 max_attempts: int = 3, initial_delay: float = 1.0,
                 sleep: Callable[[float], None] = time.sleep):
        self.store = store
        self.llm = llm
        self.availability = availability
        self.top_k = top_k
        self.system_prompt = system_prompt
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.sleep = sleep

    def _retry(self, operation):
        return with_retry(operation, self.max_attempts, self.initial_delay, self.sleep)

    def query(self, question: str, filters: Optional[Dict[str, Any]] = None) -> QueryResult:
        """
        Answer a question from the indexed RFP data.

        Args:
            question: Free-text question
            filters: Optional {"category": ..., "sheetName": ...}

        Returns:
            QueryResult; never raises
        """
        try:
            return self._answer(question, filters)
        except Exception as e:
            logger.error("Error querying RFP data: %s", e)
            return QueryResult(answer=prompts.FALLBACK_ANSWER, sources=[], error=str(e))

    def _answer(self, question: str, filters: Optional[Dict[str, Any]]) -> QueryResult:
        if is_greeting(question):
            return QueryResult(answer=prompts.GREETING_ANSWER, sources=[])

        embedding = self._retry(lambda: self.llm.embed(question))
        logger.debug("Generated embedding with length: %d", len(embedding))

        conditions = build_filter(filters)

        if self.availability is StoreAvailability.DEGRADED:
            logger.warning("MOCK MODE: Simulating RFP query response")
            return QueryResult(answer=prompts.degraded_answer(question), sources=[], mock_mode=True)

        matches = self._retry(lambda: self.store.query(embedding, self.top_k, conditions))
        if not matches:
            logger.info("No matches found in Pinecone")
            return QueryResult(answer=prompts.NO_MATCHES_ANSWER, sources=[])

        contexts = [to_source_context(match) for match in matches]
        user_prompt = prompts.build_user_prompt(question, contexts)
        answer = self._retry(lambda: self.llm.complete(self.system_prompt, user_prompt))

        return QueryResult(answer=answer, sources=contexts)
