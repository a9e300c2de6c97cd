"""Async client for the MemoryStack memory store."""

import logging
from typing import Any, Optional, TypeVar, Union

import httpx
import pydantic

from .exceptions import InvalidResponseError, TransportError, error_for_status
from .models import (
    AddResponse,
    BulkDeleteResponse,
    ConsolidateResponse,
    DeleteResponse,
    ListResponse,
    ReflectResponse,
    SearchResponse,
    StatsResponse,
)
from .types import AnalysisDepth, MemoryType

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://memorystack.app"

_Response = TypeVar("_Response", bound=pydantic.BaseModel)


def _to_value(v: Any) -> Any:
    """Extract string value from an enum member, or return string as-is."""
    return v.value if hasattr(v, "value") else v


def _detail(response: httpx.Response) -> Optional[str]:
    """Error message sent by the store, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("detail") or body.get("error")
        return str(message) if message else None
    return None


def _parse(model: type[_Response], data: dict[str, Any]) -> _Response:
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "body"
        raise InvalidResponseError(f"Invalid response: {location}: {first['msg']}") from e


class MemoryStackClient:
    """
    Python client for the MemoryStack API.

    Usage:
        async with MemoryStackClient(api_key="your-api-key") as client:
            await client.add("User prefers dark mode", memory_type=MemoryType.PREFERENCE)
            results = await client.search("ui preferences", limit=5)

    Long-lived owners (the plugin service) call ``connect()`` and
    ``close()`` instead of using the context manager. A request made
    before ``connect()`` opens the connection pool on demand.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ):
        """
        Initialize MemoryStack client.

        Args:
            api_key: API key for authentication
            base_url: API base URL (default: https://memorystack.app)
            timeout: Request timeout in seconds (default: 30.0)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        """Open the underlying HTTP connection pool."""
        self._ensure_client()

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MemoryStackClient":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the HTTP client, opening it on first use."""
        if self._client is None:
            headers = {}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}/api/v1",
                headers=headers,
                timeout=self.timeout,
            )
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Make HTTP request with error handling.

        Raises:
            AuthenticationError: Invalid API key (401)
            AuthorizationError: Access denied (403)
            NotFoundError: Memory not found (404)
            ValidationError: Payload rejected (422)
            RateLimitError: API call limit reached (429)
            ServerError: Store unavailable (5xx)
            TransportError: Connection failure or timeout
            InvalidResponseError: Body is not a JSON object
            MemoryStackError: Any other error status
        """
        client = self._ensure_client()
        logger.debug("memorystack → %s %s %s", method, path, json if json is not None else params)

        try:
            response = await client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e}") from e

        if response.status_code >= 400:
            raise error_for_status(response.status_code, _detail(response))

        # Handle No Content responses
        if response.status_code == 204:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponseError(f"Invalid JSON response: {e}", status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise InvalidResponseError(
                f"Invalid response: expected an object, got {type(data).__name__}",
                status_code=response.status_code,
            )

        logger.debug("memorystack ← %s %s (%d)", method, path, response.status_code)
        return data

    async def search(
        self,
        query: str,
        *,
        limit: int = 5,
        memory_type: Optional[Union[str, MemoryType]] = None,
        user_id: Optional[str] = None,
        agent_id: Optional[str] = None,
        team_id: Optional[str] = None,
        session_id: Optional[str] = None,
        min_confidence: Optional[float] = None,
        start_date: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> SearchResponse:
        """
        Search memories by semantic query.

        Only the filters that are set are sent; an omitted filter means
        no constraint on that axis.
        """
        payload: dict[str, Any] = {"query": query, "limit": limit}
        if memory_type is not None:
            payload["memory_type"] = _to_value(memory_type)
        if user_id is not None:
            payload["user_id"] = user_id
        if agent_id is not None:
            payload["agent_id"] = agent_id
        if team_id is not None:
            payload["team_id"] = team_id
        if session_id is not None:
            payload["session_id"] = session_id
        if min_confidence is not None:
            payload["min_confidence"] = min_confidence
        if start_date is not None:
            payload["start_date"] = start_date
        if metadata:
            payload["metadata"] = metadata

        data = await self._request("POST", "/memories/search", json=payload)
        return _parse(SearchResponse, data)

    async def add(
        self,
        content: str,
        *,
        user_id: Optional[str] = None,
        agent_id: Optional[str] = None,
        session_id: Optional[str] = None,
        team_id: Optional[str] = None,
        conversation_id: Optional[str] = None,
        memory_type: Optional[Union[str, MemoryType]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AddResponse:
        """
        Store new information. The store extracts and scores memories from it.

        Example:
            result = await client.add(
                "User prefers concise answers",
                agent_id="main",
                memory_type=MemoryType.PREFERENCE,
            )
        """
        payload: dict[str, Any] = {"content": content}
        if user_id is not None:
            payload["user_id"] = user_id
        if agent_id is not None:
            payload["agent_id"] = agent_id
        if session_id is not None:
            payload["session_id"] = session_id
        if team_id is not None:
            payload["team_id"] = team_id
        if conversation_id is not None:
            payload["conversation_id"] = conversation_id
        if memory_type is not None:
            payload["memory_type"] = _to_value(memory_type)
        if metadata:
            payload["metadata"] = metadata

        data = await self._request("POST", "/memories", json=payload)
        return _parse(AddResponse, data)

    async def get_stats(self) -> StatsResponse:
        """Get memory and API usage statistics for the account."""
        data = await self._request("GET", "/stats")
        return _parse(StatsResponse, data)

    async def delete_memory(self, memory_id: str, hard: bool = False) -> DeleteResponse:
        """
        Delete or soft-delete a memory.

        Args:
            memory_id: ID of memory to delete
            hard: Permanently delete (default: False for soft delete)
        """
        params = {"hard": "true" if hard else "false"}
        data = await self._request("DELETE", f"/memories/{memory_id}", params=params)
        if not data:
            return DeleteResponse(success=True)
        return _parse(DeleteResponse, data)

    async def delete_memories(self, memory_ids: list[str], hard: bool = False) -> BulkDeleteResponse:
        """Delete several memories in one call."""
        payload = {"memory_ids": memory_ids, "hard": hard}
        data = await self._request("POST", "/memories/bulk-delete", json=payload)
        return _parse(BulkDeleteResponse, data)

    async def list_memories(self, limit: int = 100) -> ListResponse:
        """List stored memories, newest first."""
        data = await self._request("GET", "/memories", params={"limit": limit})
        return _parse(ListResponse, data)

    async def consolidate_memories(
        self,
        similarity_threshold: float = 0.85,
        dry_run: bool = False,
    ) -> ConsolidateResponse:
        """
        Ask the store to merge duplicate or highly similar memories.

        Args:
            similarity_threshold: Similarity threshold 0.0-1.0 (default: 0.85)
            dry_run: Preview only, don't merge (default: False)
        """
        payload = {"similarity_threshold": similarity_threshold, "dry_run": dry_run}
        data = await self._request("POST", "/memories/consolidate", json=payload)
        return _parse(ConsolidateResponse, data)

    async def reflect_on_memories(
        self,
        time_window_days: int = 7,
        analysis_depth: Union[str, AnalysisDepth] = AnalysisDepth.SHALLOW,
        dry_run: bool = False,
    ) -> ReflectResponse:
        """
        Ask the store to analyze recent memories for patterns and insights.

        Args:
            time_window_days: Analyze memories from the last N days (default: 7)
            analysis_depth: "shallow" or "deep" (default: "shallow")
            dry_run: Preview only, don't save insights (default: False)
        """
        payload = {
            "time_window_days": time_window_days,
            "analysis_depth": _to_value(analysis_depth),
            "dry_run": dry_run,
        }
        data = await self._request("POST", "/memories/reflect", json=payload)
        return _parse(ReflectResponse, data)
