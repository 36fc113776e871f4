"""Content-addressed vector ids used to deduplicate re-ingested rows."""

import hashlib
from typing import Any, Dict

from rfp_assistant.models import ExtractedRecord

# Only this many leading characters of the text take part in the id.
# Existing indexes were keyed this way; near-duplicate long rows that share
# their first 50 characters collide.
TEXT_PREFIX_LENGTH = 50


def generate_stable_id(metadata: Dict[str, Any], record: ExtractedRecord) -> str:
    """
    Derive the vector id for a record.

    Args:
        metadata: Ingestion metadata (must carry "rfp_id")
        record: The extracted row

    Returns:
        32-character hex MD5 digest
    """
    content = "-".join([
        str(metadata.get("rfp_id")),
        record.sheet_name,
        record.category,
        record.text[:TEXT_PREFIX_LENGTH],
    ])
    return hashlib.md5(content.encode("utf-8")).hexdigest()
