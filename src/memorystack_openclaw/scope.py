"""Resolution of search filters from explicit parameters and turn context.

Each axis is resolved independently, first match wins:

- agent:   explicit ``agent_id`` > ``scope="agent"`` with a known agent > none
- session: explicit ``session_id`` > ``current_session`` with a session key > none
- team:    ``scope="team"`` with a known team > none

The agent and team axes do not exclude each other. An explicit ``agent_id``
combined with ``scope="team"`` filters on both.
"""

from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

from .context import effective_agent_id
from .models import SearchFilter
from .types import SearchScope
from .utils import utc_now

DEFAULT_SEARCH_LIMIT = 5


class SearchParams(BaseModel):
    """Parameters of an interactive memory search."""

    query: str = Field(description="Search query")
    limit: int = Field(default=DEFAULT_SEARCH_LIMIT, ge=1, description="Max results (default: 5)")
    agent_id: Optional[str] = Field(
        default=None,
        description="Filter by specific agent/subagent UUID (e.g., from a spawned subagent)",
    )
    session_id: Optional[str] = Field(default=None, description="Filter by specific session key")
    memory_type: Optional[str] = Field(
        default=None,
        description="Filter by type: fact, preference, episode, procedure, belief",
    )
    min_confidence: Optional[float] = Field(
        default=None, ge=0.0, le=1.0, description="Minimum confidence score 0-1 (default: 0)"
    )
    days_ago: Optional[float] = Field(default=None, ge=0, description="Only memories from last N days")
    current_session: bool = Field(default=False, description="Filter to current session only (default: false)")
    scope: Optional[SearchScope] = Field(
        default=None, description="Scope of search: 'global', 'agent', 'team' (default: 'global')"
    )
    metadata: Optional[dict[str, Any]] = Field(
        default=None, description="Filter by metadata fields (e.g., {\"parent_agent_id\": \"main\"})"
    )


def resolve_search_filter(
    params: SearchParams,
    context: Mapping[str, Any],
    now: Optional[datetime] = None,
) -> SearchFilter:
    """
    Compute the filters for one search.

    Args:
        params: Explicit search parameters
        context: Normalized turn context snapshot
        now: Reference time for ``days_ago`` (default: current UTC time)

    Returns:
        Filter with only the axes that were actually determined
    """
    search_filter = SearchFilter(
        scope=params.scope,
        memory_type=params.memory_type,
        min_confidence=params.min_confidence,
    )

    if params.agent_id:
        search_filter.agent_id = params.agent_id
    elif params.scope == SearchScope.AGENT and (context.get("subagentId") or context.get("agentId")):
        search_filter.agent_id = effective_agent_id(context)

    if params.scope == SearchScope.TEAM and context.get("teamId"):
        search_filter.team_id = context["teamId"]

    session_key = context.get("sessionKey")
    if params.session_id:
        search_filter.session_id = params.session_id
    elif params.current_session and session_key:
        search_filter.session_id = session_key

    if params.metadata:
        search_filter.metadata = params.metadata

    if params.days_ago:
        start = (now or utc_now()) - timedelta(days=params.days_ago)
        search_filter.start_date = start.isoformat()

    return search_filter
