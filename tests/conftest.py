"""
Pytest configuration and fixtures for RFP Assistant tests.
"""
import sys
from io import BytesIO
from pathlib import Path
from typing import Dict, List

import pytest
from openpyxl import Workbook

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from rfp_assistant.llm_gateway import LLMGateway  # noqa: E402
from rfp_assistant.vector_store import VectorStoreGateway  # noqa: E402


class FakeStore(VectorStoreGateway):
    """In-memory store that records every call."""

    strategy = "fake"

    def __init__(self):
        self.vectors = {}
        self.calls = []
        self.upserts = []
        self.matches = []
        self.healthy = True
        self.fetch_error = None
        self.query_error = None
        self.fail_upsert_when = None

    def fetch_by_ids(self, ids):
        self.calls.append(("fetch", list(ids)))
        if self.fetch_error:
            raise self.fetch_error
        return {i: self.vectors[i] for i in ids if i in self.vectors}

    def upsert(self, records):
        self.calls.append(("upsert", [r.id for r in records]))
        if self.fail_upsert_when and self.fail_upsert_when(records):
            raise RuntimeError("upsert rejected")
        self.upserts.append(list(records))
        for record in records:
            self.vectors[record.id] = record.to_dict()

    def query(self, vector, top_k=5, filter=None):
        self.calls.append(("query", {"vector": vector, "top_k": top_k, "filter": filter}))
        if self.query_error:
            raise self.query_error
        return list(self.matches)

    def health_check(self):
        self.calls.append(("health", None))
        return self.healthy


class FakeLLM(LLMGateway):
    """Deterministic embeddings and a canned completion."""

    embedding_model = "fake-embedding"
    chat_model = "fake-chat"

    def __init__(self, answer="Generated answer"):
        self.answer = answer
        self.embedded = []
        self.completions = []
        self.failing_texts = set()
        self.embed_error = None
        self.complete_error = None

    def embed(self, text):
        self.embedded.append(text)
        if self.embed_error:
            raise self.embed_error
        if any(marker in text for marker in self.failing_texts):
            raise RuntimeError("embedding quota exceeded")
        return [float(len(text)), 0.5, 0.25]

    def complete(self, system_prompt, user_prompt):
        self.completions.append((system_prompt, user_prompt))
        if self.complete_error:
            raise self.complete_error
        return self.answer


def build_workbook(sheets: Dict[str, List[list]]) -> bytes:
    """Write {sheet name: rows} to .xlsx bytes."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(title=name)
        for row in rows:
            sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def workbook_builder():
    return build_workbook


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    delays = []

    def sleep(seconds):
        delays.append(seconds)

    sleep.delays = delays
    return sleep


@pytest.fixture
def security_workbook():
    """Two sheets, three categories, one blank row."""
    return build_workbook({
        "Security": [
            ["Category", "Question", "Answer"],
            ["Authentication", "Do you support SSO?", "Yes, via SAML 2.0 and OIDC."],
            ["Encryption", "Is data encrypted at rest?", "Yes, AES-256."],
            [None, None, None],
            ["Authentication", "Is MFA enforced?", "MFA is enforced for all admin users."],
        ],
        "Hosting": [
            ["Category", "Question", "Answer"],
            ["Infrastructure", "Where is data hosted?", "EU and US regions."],
        ],
    })


@pytest.fixture
def large_workbook():
    """25 distinct rows on one sheet."""
    rows = [["Category", "Question", "Answer"]]
    for i in range(25):
        rows.append(["General", f"Question number {i:02d}", f"Answer number {i:02d}"])
    return build_workbook({"Main": rows})
