"""
Data Model Module

Records and results passed between the extractor, the ingestion pipeline,
the vector store gateway and the query service.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ExtractedRecord:
    """One spreadsheet row rendered for embedding.

    Attributes:
        category: Value of the row's Category field, or "uncategorized"
        sheet_name: Worksheet the row came from
        text: Newline-joined "Header: value" rendering of the row
        original_data: Raw header -> cell text mapping, kept for citation
    """

    category: str
    sheet_name: str
    text: str
    original_data: Dict[str, str] = field(default_factory=dict)


@dataclass
class VectorRecord:
    """A vector staged for upsert into the index."""

    id: str
    values: List[float]
    metadata: Dict[str, Any]

    @classmethod
    def from_record(cls, vector_id: str, values: List[float],
                    record: ExtractedRecord, metadata: Dict[str, Any]) -> "VectorRecord":
        merged = dict(metadata)
        merged.update({
            "category": record.category,
            "sheetName": record.sheet_name,
            "text": record.text,
            "originalData": json.dumps(record.original_data),
        })
        return cls(id=vector_id, values=list(values), metadata=merged)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "values": self.values, "metadata": self.metadata}


@dataclass
class IngestionStats:
    """Counters accumulated over one ingestion run."""

    total_items: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalItems": self.total_items,
            "processed": self.processed,
            "skipped": self.skipped,
            "errors": self.errors,
        }


@dataclass
class IngestionResult:
    success: bool
    stats: IngestionStats
    sheets: List[str]
    mock_mode: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": self.success,
            "stats": self.stats.to_dict(),
            "sheets": list(self.sheets),
        }
        if self.mock_mode:
            result["mockMode"] = True
        return result


@dataclass
class QueryMatch:
    """A similarity match as returned by either store strategy."""

    id: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SourceContext:
    """A retrieved record cited alongside a generated answer."""

    text: str
    original_data: Dict[str, Any]
    category: str
    sheet_name: str
    similarity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "originalData": self.original_data,
            "category": self.category,
            "sheetName": self.sheet_name,
            "similarity": self.similarity,
        }


@dataclass
class QueryResult:
    answer: str
    sources: List[SourceContext] = field(default_factory=list)
    mock_mode: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "answer": self.answer,
            "sources": [source.to_dict() for source in self.sources],
        }
        if self.mock_mode:
            result["mockMode"] = True
        if self.error is not None:
            result["error"] = self.error
        return result
