"""Search backend client.

The full-text search runs server-side behind a GraphQL
``universalSearch`` query. This module only speaks its
request/response contract; it hands the raw payload to the
normalizer untouched.
"""

import logging
from typing import Any, Protocol

import httpx

logger = logging.getLogger(__name__)

UNIVERSAL_SEARCH_QUERY = """\
query UniversalSearch($query: String!, $limit: Int) {
  universalSearch(query: $query, limit: $limit)
}
"""


class SearchBackendError(Exception):
    """The search backend failed or reported errors.

    Attributes:
        errors: Structured error list from the GraphQL response, if any.
    """

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []


class SearchBackend(Protocol):
    """Anything that can run a search and return the raw payload."""

    async def search(self, query: str, limit: int | None = None) -> Any: ...


class GraphQLSearchBackend:
    """Runs ``universalSearch`` against a GraphQL endpoint over HTTP.

    The httpx client can be injected (tests pass one with a mock
    transport); otherwise one is created and owned by this backend.

    Example:
        backend = GraphQLSearchBackend("https://api.example.com/graphql", api_key="...")
        payload = await backend.search("interview", limit=10)
        await backend.aclose()
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the backend.

        Args:
            endpoint: GraphQL endpoint URL.
            api_key: Sent as the x-api-key header when given.
            timeout: Request timeout in seconds (ignored for injected clients).
            client: Optional pre-built httpx client.
        """
        self._endpoint = endpoint
        self._headers = {"x-api-key": api_key} if api_key else {}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def search(self, query: str, limit: int | None = None) -> Any:
        """Run a search and return the raw ``universalSearch`` payload.

        The payload may be a list or a JSON string encoding one.

        Raises:
            SearchBackendError: On transport failure, non-2xx status,
                an undecodable body, or a non-empty GraphQL errors list.
        """
        variables: dict[str, Any] = {"query": query}
        if limit is not None:
            variables["limit"] = limit

        logger.debug("Searching %s for %r (limit=%s)", self._endpoint, query, limit)

        try:
            response = await self._client.post(
                self._endpoint,
                json={"query": UNIVERSAL_SEARCH_QUERY, "variables": variables},
                headers=self._headers,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise SearchBackendError(
                f"Search request failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise SearchBackendError(f"Search request failed: {e}") from e
        except ValueError as e:
            raise SearchBackendError(f"Search response is not JSON: {e}") from e

        if not isinstance(body, dict):
            raise SearchBackendError("Search response is not a JSON object")

        errors = body.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [{"message": str(errors)}]
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise SearchBackendError(f"Search returned errors: {messages}", errors)

        data = body.get("data") or {}
        if not isinstance(data, dict):
            return None
        return data.get("universalSearch")

    async def aclose(self) -> None:
        """Close the HTTP client if this backend created it."""
        if self._owns_client:
            await self._client.aclose()
