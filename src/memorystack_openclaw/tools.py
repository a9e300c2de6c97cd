"""Agent tools backed by the MemoryStack store.

Each tool takes its validated parameter model and the normalized context
snapshot of the current turn, and returns a ``ToolResult``. Store failures
are turned into a readable failure message rather than raised.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from pydantic import BaseModel, Field

from .client import MemoryStackClient
from .context import compact, effective_agent_id
from .exceptions import MemoryStackError
from .models import ToolResult
from .scope import SearchParams, resolve_search_filter
from .types import AnalysisDepth
from .utils import format_confidence, preview, utc_now_iso

logger = logging.getLogger(__name__)

TOOL_SOURCE = "clawdbot_tool"
MAX_LISTED_ITEMS = 5

SEARCH_DESCRIPTION = """Search through long-term memories using semantic search.

**Automatic Context**: Your agent_id, session_id, team_id, and conversation_id are available for filtering.

**Scoping Options**:
- scope="global": Search all memories (default)
- scope="agent": Search only memories from THIS agent
- scope="team": Search only memories from this team/group

**Explicit Filters** (override scope):
- agent_id: Search memories from a specific agent/subagent by UUID
- session_id: Search memories from a specific session
- metadata: Filter by metadata key-value pairs (e.g., parent_agent_id, source)

**Filtering**: Supports memory_type, min_confidence, days_ago, and current_session filters."""

ADD_DESCRIPTION = """Save important information to long-term memory with automatic importance scoring.

**Automatic Context Capture**: The following are automatically captured from your session context:
- agent_id: Your agent identifier (e.g., "main", subagent UUID)
- session_id: Current session key for conversation tracking
- team_id: Team/group identifier (if in a group chat)
- conversation_id: Specific conversation thread ID
- user_id: The sender's ID (can be overridden with user_id parameter)

You don't need to specify these manually - they are captured automatically to organize memories."""


class AddParams(BaseModel):
    text: str = Field(description="Information to remember")
    user_id: Optional[str] = Field(default=None, description="Override user ID (defaults to sender)")
    memory_type: Optional[str] = Field(
        default=None, description="Type of memory: fact, preference, episode, procedure, belief"
    )


class StatsParams(BaseModel):
    pass


class DeleteParams(BaseModel):
    memory_id: str = Field(description="UUID of the memory to delete")
    hard: bool = Field(default=False, description="Permanently delete (true) or soft delete (false, default)")


class ReflectParams(BaseModel):
    time_window_days: int = Field(
        default=7, ge=1, le=90, description="Analyze memories from last N days (default: 7, max: 90)"
    )
    analysis_depth: AnalysisDepth = Field(
        default=AnalysisDepth.SHALLOW,
        description="Analysis depth: 'shallow' (faster) or 'deep' (more thorough)",
    )
    dry_run: bool = Field(default=False, description="Preview only, don't save insights (default: false)")


class ConsolidateParams(BaseModel):
    similarity_threshold: float = Field(
        default=0.85, ge=0.0, le=1.0,
        description="Similarity threshold 0-1 (default: 0.85). Higher = stricter matching.",
    )
    dry_run: bool = Field(default=False, description="Preview only, don't merge (default: false)")
    max_pairs: int = Field(default=20, ge=1, description="Max pairs to process (default: 20)")


ToolHandler = Callable[[Any, Mapping[str, Any]], Awaitable[ToolResult]]


@dataclass(frozen=True)
class ToolDefinition:
    """A tool as registered with the host runtime."""

    name: str
    label: str
    description: str
    parameters: type[BaseModel]
    execute: ToolHandler

    @property
    def parameters_schema(self) -> dict[str, Any]:
        return self.parameters.model_json_schema()

    async def invoke(self, raw_params: Mapping[str, Any], context: Mapping[str, Any]) -> ToolResult:
        """Validate raw host parameters and run the tool."""
        return await self.execute(self.parameters.model_validate(raw_params), context)


class MemoryTools:
    """The tool set exposed to the agent."""

    def __init__(self, client: MemoryStackClient):
        self.client = client

    def definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition("memorystack_search", "Memory Search", SEARCH_DESCRIPTION, SearchParams, self.search),
            ToolDefinition("memorystack_add", "Memory Add", ADD_DESCRIPTION, AddParams, self.add),
            ToolDefinition(
                "memorystack_stats", "Memory Stats",
                "Get statistics about memory usage and API calls.",
                StatsParams, self.stats,
            ),
            ToolDefinition(
                "memorystack_delete", "Delete Memory",
                "Delete a memory by ID. Use search first to find the memory ID if you only have the content.",
                DeleteParams, self.delete,
            ),
            ToolDefinition(
                "memorystack_reflect", "Reflect on Memories",
                "Analyze memories to discover patterns, generate insights, and identify recurring themes. "
                "Great for understanding user behavior over time.",
                ReflectParams, self.reflect,
            ),
            ToolDefinition(
                "memorystack_consolidate", "Consolidate Memories",
                "Merge duplicate or highly similar memories to reduce noise and keep memory clean. "
                "Useful for maintenance.",
                ConsolidateParams, self.consolidate,
            ),
        ]

    async def search(self, params: SearchParams, context: Mapping[str, Any]) -> ToolResult:
        if not params.query.strip():
            return ToolResult.text("Usage: provide a non-empty query to search memories.", is_error=True)

        search_filter = resolve_search_filter(params, context)
        logger.debug(
            "memorystack → search %s",
            {"query": params.query, "scope": params.scope, "filter": search_filter.to_search_kwargs()},
        )

        try:
            results = await self.client.search(
                params.query,
                limit=params.limit,
                user_id=context.get("userId"),
                **search_filter.to_search_kwargs(),
            )
        except MemoryStackError as e:
            logger.error("memorystack: search failed: %s", e)
            return ToolResult.text(f"Search failed: {e.message}", is_error=True)

        logger.debug("memorystack ← search %s", {"count": results.count})

        if results.count == 0 or not results.results:
            return ToolResult.text("No relevant memories found.")

        lines = []
        for i, r in enumerate(results.results, start=1):
            memory_type = f" [{r.memory_type}]" if r.memory_type else ""
            timestamp = f" [{r.created_at}]" if r.created_at else ""
            lines.append(f"{i}. {r.content}{memory_type}{format_confidence(r.confidence)}{timestamp}")

        details = {
            "count": results.count,
            "mode": results.mode,
            "memories": [r.model_dump() for r in results.results],
        }
        return ToolResult.text(f"Found {results.count} memories:\n\n" + "\n".join(lines), details=details)

    async def add(self, params: AddParams, context: Mapping[str, Any]) -> ToolResult:
        if not params.text.strip():
            return ToolResult.text("Usage: provide the text to remember.", is_error=True)

        session_key = context.get("sessionKey")
        user_id = params.user_id or context.get("userId")
        agent_id = effective_agent_id(context)
        metadata = compact({
            "source": TOOL_SOURCE,
            "session_key": session_key,
            "timestamp": utc_now_iso(),
            "user_id": user_id,
            "parent_agent_id": context.get("agentId"),
            "subagent_id": context.get("subagentId"),
            "provider": context.get("Provider"),
            "model": context.get("Model"),
            "sender_name": context.get("SenderName"),
        })

        logger.debug(
            "memorystack → add %s",
            {"text_length": len(params.text), "session_key": session_key, "agent_id": agent_id},
        )

        try:
            result = await self.client.add(
                params.text,
                user_id=user_id,
                session_id=session_key,
                agent_id=agent_id,
                team_id=context.get("teamId"),
                conversation_id=context.get("conversationId"),
                memory_type=params.memory_type,
                metadata=metadata,
            )
        except MemoryStackError as e:
            logger.error("memorystack: add failed: %s", e)
            return ToolResult.text(f"Failed to save memory: {e.message}", is_error=True)

        logger.debug("memorystack ← add %s", result.model_dump())

        return ToolResult.text(
            f'Stored: "{preview(params.text, 80)}"\n'
            f"Created {result.memories_created} memory (IDs: {', '.join(result.memory_ids)})",
            details=result.model_dump(),
        )

    async def stats(self, params: StatsParams, context: Mapping[str, Any]) -> ToolResult:
        logger.debug("memorystack → stats")
        try:
            stats = await self.client.get_stats()
        except MemoryStackError as e:
            logger.error("memorystack: stats failed: %s", e)
            return ToolResult.text(f"Failed to get stats: {e.message}", is_error=True)

        storage_mb = stats.storage.total_storage_bytes / 1024 / 1024
        text = "\n".join([
            f"**Total Memories:** {stats.totals.total_memories}",
            f"**API Calls:** {stats.usage.current_month_api_calls} / {stats.usage.monthly_api_limit}",
            f"**Plan:** {stats.plan_tier or 'Free'}",
            f"**Storage:** {storage_mb:.2f} MB",
        ])
        return ToolResult.text(f"# MemoryStack Stats\n\n{text}", details=stats.model_dump())

    async def delete(self, params: DeleteParams, context: Mapping[str, Any]) -> ToolResult:
        logger.debug("memorystack → delete %s", params.model_dump())
        try:
            result = await self.client.delete_memory(params.memory_id, params.hard)
        except MemoryStackError as e:
            logger.error("memorystack: delete failed: %s", e)
            return ToolResult.text(f"❌ Failed to delete memory: {e.message}", is_error=True)

        if result.success:
            return ToolResult.text(
                f"✅ Memory deleted successfully (ID: {params.memory_id})", details=result.model_dump()
            )
        return ToolResult.text("❌ Failed to delete memory", details=result.model_dump(), is_error=True)

    async def reflect(self, params: ReflectParams, context: Mapping[str, Any]) -> ToolResult:
        logger.debug("memorystack → reflect %s", params.model_dump())
        try:
            result = await self.client.reflect_on_memories(
                time_window_days=params.time_window_days,
                analysis_depth=params.analysis_depth,
                dry_run=params.dry_run,
            )
        except MemoryStackError as e:
            logger.error("memorystack: reflect failed: %s", e)
            return ToolResult.text(f"❌ Reflection failed: {e.message}", is_error=True)

        patterns = result.patterns or []
        insights = result.insights or []
        lines = [
            "# 🔮 Memory Reflection",
            "",
            f"**Memories Analyzed:** {result.memories_analyzed}",
            f"**Patterns Found:** {len(patterns)}",
            f"**Insights Generated:** {result.insights_generated}",
        ]
        if patterns:
            lines += ["", "## Patterns"]
            for pattern in patterns[:MAX_LISTED_ITEMS]:
                summary = pattern.get("description") or pattern.get("content") or ""
                lines.append(f"- **{pattern.get('type') or 'Pattern'}:** {summary}")
        if insights:
            lines += ["", "## Insights"]
            for insight in insights[:MAX_LISTED_ITEMS]:
                text = insight.get("content", insight) if isinstance(insight, dict) else insight
                lines.append(f"- {text}")
        if params.dry_run:
            lines += ["", "*This was a dry run - no insights were saved.*"]

        return ToolResult.text("\n".join(lines), details=result.model_dump())

    async def consolidate(self, params: ConsolidateParams, context: Mapping[str, Any]) -> ToolResult:
        logger.debug("memorystack → consolidate %s", params.model_dump())
        try:
            result = await self.client.consolidate_memories(
                similarity_threshold=params.similarity_threshold,
                dry_run=params.dry_run,
            )
        except MemoryStackError as e:
            logger.error("memorystack: consolidate failed: %s", e)
            return ToolResult.text(f"❌ Consolidation failed: {e.message}", is_error=True)

        lines = [
            "# 🧹 Memory Consolidation",
            "",
            f"**Memories Processed:** {result.memories_processed}",
            f"**Duplicates Merged:** {result.memories_merged}",
            f"**Memories Removed:** {result.memories_removed}",
        ]
        if result.merged_pairs:
            lines += ["", "## Merged Pairs"]
            for pair in result.merged_pairs[:MAX_LISTED_ITEMS]:
                lines.append(f'- Merged: "{(pair.original or "")[:50]}..." → "{(pair.merged or "")[:50]}..."')

        lines.append("")
        if params.dry_run:
            lines.append("*This was a dry run - no changes were made.*")
        elif result.memories_merged == 0:
            lines.append("✨ No duplicates found - your memory is already clean!")
        else:
            lines.append("✅ Consolidation complete!")

        return ToolResult.text("\n".join(lines), details=result.model_dump())
