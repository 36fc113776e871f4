"""
RFP Assistant - Spreadsheet RFP ingestion and retrieval-augmented answers.

This package extracts records from RFP spreadsheets, stores their embeddings
in a Pinecone index with content-addressed deduplication, and answers
questions by summarizing the most similar stored records with an LLM.
"""

from rfp_assistant.assistant import RFPAssistant
from rfp_assistant.config import Config
from rfp_assistant.models import IngestionResult, IngestionStats, QueryResult, SourceContext

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "RFPAssistant",
    "Config",
    "IngestionResult",
    "IngestionStats",
    "QueryResult",
    "SourceContext",
]
