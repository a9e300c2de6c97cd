"""Slash commands: /add, /search and /stats."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from .client import MemoryStackClient
from .context import effective_agent_id
from .exceptions import MemoryStackError
from .models import CommandReply
from .utils import format_confidence, preview

logger = logging.getLogger(__name__)

COMMAND_SOURCE = "openclaw_command"
COMMAND_SEARCH_LIMIT = 5

CommandHandler = Callable[[Optional[str], Mapping[str, Any]], Awaitable[CommandReply]]


@dataclass(frozen=True)
class CommandDefinition:
    name: str
    description: str
    accepts_args: bool
    handler: CommandHandler
    require_auth: bool = True


class SlashCommands:
    """Chat commands for managing memories by hand."""

    def __init__(self, client: MemoryStackClient):
        self.client = client

    def definitions(self) -> list[CommandDefinition]:
        return [
            CommandDefinition("add", "Save something to long-term memory", True, self.add),
            CommandDefinition("search", "Search your long-term memories", True, self.search),
            CommandDefinition("stats", "View your memory usage statistics", False, self.stats),
        ]

    async def add(self, args: Optional[str], context: Mapping[str, Any]) -> CommandReply:
        text = (args or "").strip()
        if not text:
            return CommandReply(text="Usage: /add <text to remember>")

        logger.debug('memorystack: /add "%s"', text[:50])
        session_key = context.get("sessionKey")

        try:
            await self.client.add(
                text,
                agent_id=effective_agent_id(context),
                session_id=session_key,
                metadata={"source": COMMAND_SOURCE, "session_key": session_key},
            )
        except MemoryStackError as e:
            logger.error("memorystack: /add failed: %s", e)
            return CommandReply(text="Failed to save memory. Check logs for details.")

        return CommandReply(text=f'✓ Saved to memory: "{preview(text, 60)}"')

    async def search(self, args: Optional[str], context: Mapping[str, Any]) -> CommandReply:
        query = (args or "").strip()
        if not query:
            return CommandReply(text="Usage: /search <search query>")

        logger.debug('memorystack: /search "%s"', query)

        try:
            results = await self.client.search(query, limit=COMMAND_SEARCH_LIMIT)
        except MemoryStackError as e:
            logger.error("memorystack: /search failed: %s", e)
            return CommandReply(text="Failed to search memories. Check logs for details.")

        if results.count == 0 or not results.results:
            return CommandReply(text=f'No memories found for: "{query}"')

        lines = []
        for i, r in enumerate(results.results, start=1):
            memory_type = f" [{r.memory_type}]" if r.memory_type else ""
            lines.append(f"{i}. {r.content}{memory_type}{format_confidence(r.confidence)}")
        return CommandReply(text=f"Found {results.count} memories:\n\n" + "\n".join(lines))

    async def stats(self, args: Optional[str], context: Mapping[str, Any]) -> CommandReply:
        logger.debug("memorystack: /stats")

        try:
            stats = await self.client.get_stats()
        except MemoryStackError as e:
            logger.error("memorystack: /stats failed: %s", e)
            return CommandReply(text="Failed to get stats. Check logs for details.")

        return CommandReply(
            text="📊 Memory Statistics\n\n"
            f"Total Memories: {stats.totals.total_memories}\n"
            f"API Calls (this month): {stats.usage.current_month_api_calls}/{stats.usage.monthly_api_limit}\n"
            f"Plan: {stats.plan_tier or 'Free'}"
        )
