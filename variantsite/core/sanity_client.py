"""
SanityClient - Query and patch documents in the hosted content backend.

Talks to the Sanity HTTP API:
- GET  /v{apiVersion}/data/query/{dataset}?query=...&$param=<json>
- POST /v{apiVersion}/data/mutate/{dataset}

The client is deliberately thin: callers hand it an opaque query string and
a parameter dict and get the raw JSON ``result`` back.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .errors import ContentConfigError, ContentFetchError

logger = logging.getLogger(__name__)


class SanityClient:
    """
    Async client for the Sanity query and mutation endpoints.

    Example:
        >>> client = SanityClient(project_id="abc123", dataset="production")
        >>> variants = await client.fetch('*[_type == "customerVariant"] | order(name asc)')
    """

    def __init__(
        self,
        project_id: str,
        dataset: str,
        api_version: str = "2024-03-19",
        token: Optional[str] = None,
        use_cdn: bool = False,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize SanityClient.

        Args:
            project_id: Sanity project id
            dataset: Dataset name (e.g., "production")
            api_version: Dated API version, without the leading "v"
            token: API token; required for mutations and private datasets
            use_cdn: Query through the API CDN (not usable for mutations)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not project_id:
            raise ContentConfigError("Sanity project id is required")

        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version.lstrip("v")
        self.token = token
        self.use_cdn = use_cdn
        self.timeout = timeout
        self._transport = transport

        logger.info(
            f"SanityClient initialized (project={project_id}, dataset={dataset}, cdn={use_cdn})"
        )

    @property
    def query_url(self) -> str:
        host = "apicdn.sanity.io" if self.use_cdn else "api.sanity.io"
        return f"https://{self.project_id}.{host}/v{self.api_version}/data/query/{self.dataset}"

    @property
    def mutate_url(self) -> str:
        return f"https://{self.project_id}.api.sanity.io/v{self.api_version}/data/mutate/{self.dataset}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def build_query_params(query: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
        """
        Encode a query and its parameters for the query endpoint.

        Each parameter becomes ``$name`` with a JSON-encoded value.
        """
        encoded = {"query": query}
        for name, value in (params or {}).items():
            encoded[f"${name}"] = json.dumps(value)
        return encoded

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.request(method, url, headers=self._headers(), **kwargs)

    async def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run a query and return its result.

        Args:
            query: Query string (e.g., '*[_type == "post" && slug.current == $slug][0]')
            params: Query parameters, JSON-encodable

        Returns:
            The ``result`` member of the response (list, dict, scalar or None)

        Raises:
            ContentFetchError: On transport failure or a non-2xx response
        """
        try:
            response = await self._send(
                "GET", self.query_url, params=self.build_query_params(query, params)
            )
        except httpx.HTTPError as e:
            raise ContentFetchError(f"Content backend unreachable: {e}", query=query) from e

        if response.status_code >= 400:
            raise ContentFetchError(
                f"Content backend returned HTTP {response.status_code}",
                status_code=response.status_code,
                query=query,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ContentFetchError("Content backend returned invalid JSON", query=query) from e

        return payload.get("result")

    async def patch(self, document_id: str, set_fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Set fields on a document.

        Args:
            document_id: Document id (published or ``drafts.`` id)
            set_fields: Field values to set

        Returns:
            Mutation response body

        Raises:
            ContentConfigError: If no API token is configured
            ContentFetchError: On transport failure or a non-2xx response
        """
        if not self.token:
            raise ContentConfigError("SANITY_TOKEN is required for document mutations")

        body = {"mutations": [{"patch": {"id": document_id, "set": set_fields}}]}

        try:
            response = await self._send("POST", self.mutate_url, json=body)
        except httpx.HTTPError as e:
            raise ContentFetchError(f"Content backend unreachable: {e}") from e

        if response.status_code >= 400:
            raise ContentFetchError(
                f"Mutation failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.info(f"Patched document {document_id}: {list(set_fields)}")
        return response.json()
