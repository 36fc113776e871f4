"""
Vector Store Gateway Module

Point fetch, batched upsert, similarity query and a health probe against a
Pinecone index. Two interchangeable strategies exist: the Pinecone SDK client,
and direct HTTP calls to the index data plane used when the SDK client cannot
be initialized.
"""

import enum
import logging
from typing import Any, Dict, List, Optional

import requests
import urllib3
from pinecone import Pinecone

from rfp_assistant.models import QueryMatch, VectorRecord

logger = logging.getLogger(__name__)

DATA_TIMEOUT = 30.0
PROBE_TIMEOUT = 10.0


class VectorStoreError(RuntimeError):
    """A non-2xx response from the index, with the response body as detail."""

    def __init__(self, operation: str, status_code: int, body: str):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"Pinecone API error ({status_code}) during {operation}: {body}")


class StoreAvailability(enum.Enum):
    CONNECTED = "connected"
    DEGRADED = "degraded"


class VectorStoreGateway:
    """Operations the pipeline and query service need from the index."""

    strategy = "abstract"

    def fetch_by_ids(self, ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Return the stored vectors among ids, keyed by id. Absent ids are missing."""
        raise NotImplementedError

    def upsert(self, records: List[VectorRecord]) -> None:
        raise NotImplementedError

    def query(self, vector: List[float], top_k: int = 5,
              filter: Optional[Dict[str, Any]] = None) -> List[QueryMatch]:
        """Ranked matches, most similar first."""
        raise NotImplementedError

    def health_check(self) -> bool:
        """True when the index answers a stats request. Never raises."""
        raise NotImplementedError


def _normalize_metadata(metadata: Any) -> Dict[str, Any]:
    if not metadata:
        return {}
    return dict(metadata)


class PineconeSDKStore(VectorStoreGateway):
    """Gateway backed by the official Pinecone client."""

    strategy = "sdk"

    def __init__(self, api_key: str, index_name: str, host: Optional[str] = None,
                 verify_ssl: bool = True, timeout: float = DATA_TIMEOUT,
                 client: Optional[Pinecone] = None):
        """
        Initialize the SDK client and open the index.

        The client has no global deadline, so timeout is sent with every data
        call as the request timeout.

        Raises:
            Whatever the client raises when it cannot be built or the index
            cannot be resolved.
        """
        self.index_name = index_name
        self.timeout = timeout
        self.client = client or Pinecone(api_key=api_key, ssl_verify=verify_ssl)
        if host:
            self.index = self.client.Index(name=index_name, host=host)
        else:
            self.index = self.client.Index(name=index_name)

    def fetch_by_ids(self, ids: List[str]) -> Dict[str, Dict[str, Any]]:
        response = self.index.fetch(ids=list(ids), _request_timeout=self.timeout)
        vectors = getattr(response, "vectors", None) or {}
        return {
            vector_id: {
                "id": vector_id,
                "metadata": _normalize_metadata(getattr(vector, "metadata", None)),
            }
            for vector_id, vector in vectors.items()
        }

    def upsert(self, records: List[VectorRecord]) -> None:
        self.index.upsert(
            vectors=[record.to_dict() for record in records],
            _request_timeout=self.timeout,
        )

    def query(self, vector: List[float], top_k: int = 5,
              filter: Optional[Dict[str, Any]] = None) -> List[QueryMatch]:
        response = self.index.query(
            vector=list(vector),
            top_k=top_k,
            include_metadata=True,
            filter=filter or None,
            _request_timeout=self.timeout,
        )
        return [
            QueryMatch(
                id=match.id,
                score=float(match.score or 0.0),
                metadata=_normalize_metadata(match.metadata),
            )
            for match in (getattr(response, "matches", None) or [])
        ]

    def health_check(self) -> bool:
        try:
            stats = self.index.describe_index_stats(_request_timeout=PROBE_TIMEOUT)
            logger.info("Pinecone connectivity test successful (sdk): %s", str(stats)[:200])
            return True
        except Exception as e:
            logger.error("Pinecone connectivity test failed (sdk): %s", e)
            return False


class PineconeHTTPStore(VectorStoreGateway):
    """
    Gateway that issues the index REST calls directly.

    TLS certificate verification follows verify_ssl; deployments on a private
    network run with it disabled. The setting is passed on every request since
    requests lets REQUESTS_CA_BUNDLE override Session.verify.
    """

    strategy = "http"

    def __init__(self, api_key: str, base_url: str, verify_ssl: bool = False,
                 timeout: float = DATA_TIMEOUT, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = session or requests.Session()
        self.session.headers.update({
            "Api-Key": api_key,
            "Content-Type": "application/json",
        })
        self.session.verify = verify_ssl

        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            logger.warning("TLS certificate verification is disabled for %s", self.base_url)

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        logger.debug("POST %s", url)
        response = self.session.post(url, json=payload, timeout=self.timeout, verify=self.verify_ssl)
        if not response.ok:
            raise VectorStoreError(path, response.status_code, response.text)
        return response.json() if response.content else {}

    def fetch_by_ids(self, ids: List[str]) -> Dict[str, Dict[str, Any]]:
        data = self._post("/vectors/fetch", {"ids": list(ids)})
        vectors = data.get("vectors") or {}
        return {
            vector_id: {
                "id": vector_id,
                "metadata": _normalize_metadata((vector or {}).get("metadata")),
            }
            for vector_id, vector in vectors.items()
        }

    def upsert(self, records: List[VectorRecord]) -> None:
        self._post("/vectors/upsert", {"vectors": [record.to_dict() for record in records]})

    def query(self, vector: List[float], top_k: int = 5,
              filter: Optional[Dict[str, Any]] = None) -> List[QueryMatch]:
        payload = {
            "vector": list(vector),
            "topK": top_k,
            "includeMetadata": True,
        }
        if filter:
            payload["filter"] = filter

        data = self._post("/query", payload)
        return [
            QueryMatch(
                id=match.get("id", ""),
                score=float(match.get("score") or 0.0),
                metadata=_normalize_metadata(match.get("metadata")),
            )
            for match in (data.get("matches") or [])
        ]

    def health_check(self) -> bool:
        url = f"{self.base_url}/describe_index_stats"
        logger.info("Testing connectivity to Pinecone at: %s", self.base_url)
        try:
            response = self.session.get(url, timeout=PROBE_TIMEOUT, verify=self.verify_ssl)
        except requests.RequestException as e:
            logger.error("Pinecone connectivity test failed with error: %s", e)
            return False

        if not response.ok:
            logger.error("Pinecone connectivity test failed with status: %s", response.status_code)
            return False

        logger.info("Pinecone connectivity test successful: %s", response.text[:200])
        return True


def create_vector_store(config) -> VectorStoreGateway:
    """
    Build the configured store strategy.

    The SDK client is preferred; if it fails to initialize, the HTTP strategy
    takes over.
    """
    def http_store():
        return PineconeHTTPStore(
            api_key=config.pinecone_api_key,
            base_url=config.pinecone_base_url,
            verify_ssl=config.pinecone_verify_ssl,
            timeout=config.request_timeout,
        )

    if config.pinecone_client == "http":
        return http_store()

    try:
        return PineconeSDKStore(
            api_key=config.pinecone_api_key,
            index_name=config.pinecone_index_name,
            host=config.pinecone_base_url if config.pinecone_host else None,
            verify_ssl=config.pinecone_verify_ssl,
            timeout=config.request_timeout,
        )
    except Exception as e:
        logger.warning("Pinecone client failed to initialize (%s); using direct HTTP API", e)
        return http_store()


def probe_availability(store: VectorStoreGateway) -> StoreAvailability:
    """Run the one-time connectivity probe."""
    try:
        connected = store.health_check()
    except Exception as e:
        logger.error("Error testing Pinecone connectivity: %s", e)
        connected = False

    if connected:
        logger.info("Successfully connected to Pinecone!")
        return StoreAvailability.CONNECTED

    logger.warning("Unable to connect to Pinecone. Switching to degraded (mock) mode.")
    return StoreAvailability.DEGRADED
