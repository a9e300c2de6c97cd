"""Pydantic models for the MemoryStack plugin."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .types import SearchScope


class MemoryRecord(BaseModel):
    """A memory entry as returned by the store."""

    id: str
    content: str
    memory_type: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    created_at: str | None = None
    metadata: dict[str, Any] | None = None


class SearchResponse(BaseModel):
    """Result from a search query."""

    count: int = 0
    mode: str | None = None
    results: list[MemoryRecord] = Field(default_factory=list)


class AddResponse(BaseModel):
    """Result from storing a memory."""

    memories_created: int = 0
    memory_ids: list[str] = Field(default_factory=list)


class StatsTotals(BaseModel):
    total_memories: int = 0
    total_api_calls: int = 0


class StatsUsage(BaseModel):
    current_month_api_calls: int = 0
    monthly_api_limit: int = 0


class StatsStorage(BaseModel):
    total_storage_bytes: int = 0


class StatsResponse(BaseModel):
    """Account usage statistics."""

    totals: StatsTotals = Field(default_factory=StatsTotals)
    usage: StatsUsage = Field(default_factory=StatsUsage)
    plan_tier: str | None = None
    storage: StatsStorage = Field(default_factory=StatsStorage)


class DeleteResponse(BaseModel):
    success: bool = False


class BulkDeleteResponse(BaseModel):
    deleted_count: int = 0


class ListResponse(BaseModel):
    count: int = 0
    results: list[MemoryRecord] = Field(default_factory=list)


class MergedPair(BaseModel):
    original: str | None = None
    merged: str | None = None


class ConsolidateResponse(BaseModel):
    """Result from a consolidation pass. The store answers in camelCase."""

    model_config = ConfigDict(populate_by_name=True)

    memories_processed: int = Field(default=0, alias="memoriesProcessed")
    memories_merged: int = Field(default=0, alias="memoriesMerged")
    memories_removed: int = Field(default=0, alias="memoriesRemoved")
    merged_pairs: list[MergedPair] | None = Field(default=None, alias="mergedPairs")


class ReflectResponse(BaseModel):
    """Result from a reflection pass. The store answers in camelCase."""

    model_config = ConfigDict(populate_by_name=True)

    memories_analyzed: int = Field(default=0, alias="memoriesAnalyzed")
    patterns: list[dict[str, Any]] | None = None
    insights_generated: int = Field(default=0, alias="insightsGenerated")
    insights: list[Any] | None = None


class SearchFilter(BaseModel):
    """
    Filters for a single search, as computed by the scope resolver.

    A field left as ``None`` means no constraint on that axis.
    """

    scope: SearchScope | None = None
    agent_id: str | None = None
    team_id: str | None = None
    session_id: str | None = None
    memory_type: str | None = None
    min_confidence: float | None = None
    start_date: str | None = None
    metadata: dict[str, Any] | None = None

    def to_search_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``MemoryStackClient.search``."""
        return self.model_dump(exclude_none=True, exclude={"scope"})


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Value returned by an agent tool."""

    content: list[TextContent]
    details: Any = None
    is_error: bool = False

    @classmethod
    def text(cls, text: str, details: Any = None, is_error: bool = False) -> "ToolResult":
        return cls(content=[TextContent(text=text)], details=details, is_error=is_error)


class CommandReply(BaseModel):
    """Value returned by a slash command."""

    text: str
