"""Host runtime entry point for the MemoryStack memory plugin.

The plugin wires configuration, the store client, the turn hooks, agent
tools, slash commands, the CLI and the service lifecycle into a host that
implements ``PluginHost``.

Turn context is never stored on the plugin. ``before_agent_start`` returns
the normalized snapshot inside a ``TurnStart``; the host hands that snapshot
back to ``agent_end`` and to every tool or command invoked during the turn.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

import click

from .capture import capture_turn
from .cli import cli
from .client import MemoryStackClient
from .commands import CommandDefinition, SlashCommands
from .config import MemoryStackConfig, parse_config
from .context import ContextSnapshot, normalize_context
from .recall import recall_for_turn
from .tools import MemoryTools, ToolDefinition

logger = logging.getLogger(__name__)

PLUGIN_ID = "openclaw-memorystack"
PLUGIN_NAME = "MemoryStack"
PLUGIN_KIND = "memory"
SERVICE_ID = "clawdbot-memorystack"

BEFORE_AGENT_START = "before_agent_start"
AGENT_END = "agent_end"


@dataclass
class TurnStart:
    """Result of the turn-start hook."""

    context: ContextSnapshot
    prepend_context: Optional[str] = None


@dataclass(frozen=True)
class ServiceDefinition:
    id: str
    start: Callable[[], Awaitable[None]]
    stop: Callable[[], Awaitable[None]]


class PluginHost(Protocol):
    """What the plugin needs from the agent runtime."""

    plugin_config: Optional[Mapping[str, Any]]

    def register_tool(self, tool: ToolDefinition) -> None: ...

    def register_command(self, command: CommandDefinition) -> None: ...

    def register_cli(self, group: click.Group, obj: dict[str, Any]) -> None: ...

    def register_service(self, service: ServiceDefinition) -> None: ...

    def on(self, event: str, handler: Callable[..., Awaitable[Any]]) -> None: ...


class MemoryStackPlugin:
    """Long-term memory for agents, backed by MemoryStack."""

    id = PLUGIN_ID
    name = PLUGIN_NAME
    kind = PLUGIN_KIND
    description = "OpenClaw powered by MemoryStack plugin"

    def __init__(self):
        self.config: Optional[MemoryStackConfig] = None
        self.client: Optional[MemoryStackClient] = None

    def register(self, host: PluginHost) -> bool:
        """
        Register everything with the host.

        Returns:
            False when no API key is configured, in which case nothing is registered
        """
        config = parse_config(host.plugin_config)
        if not config.api_key:
            logger.error(
                "memorystack: API key is required. Set MEMORYSTACK_API_KEY or configure in plugin config."
            )
            return False

        logging.getLogger(__package__).setLevel(logging.DEBUG if config.debug else logging.INFO)

        self.config = config
        self.client = MemoryStackClient(api_key=config.api_key, base_url=config.base_url)

        for tool in MemoryTools(self.client).definitions():
            host.register_tool(tool)

        # Always registered: tools need the normalized context even without auto-recall.
        host.on(BEFORE_AGENT_START, self.before_agent_start)
        if config.auto_capture:
            host.on(AGENT_END, self.agent_end)

        for command in SlashCommands(self.client).definitions():
            host.register_command(command)

        host.register_cli(cli, {"api_key": config.api_key, "base_url": config.base_url})
        host.register_service(ServiceDefinition(id=SERVICE_ID, start=self.start, stop=self.stop))
        return True

    async def before_agent_start(
        self,
        event: Mapping[str, Any],
        ctx: Optional[Mapping[str, Any]] = None,
    ) -> TurnStart:
        context = normalize_context(ctx)
        if not self.config.auto_recall:
            return TurnStart(context=context)
        prepend = await recall_for_turn(self.client, event, context, self.config)
        return TurnStart(context=context, prepend_context=prepend)

    async def agent_end(self, event: Mapping[str, Any], context: Optional[Mapping[str, Any]] = None) -> None:
        await capture_turn(self.client, event, context or {})

    async def start(self) -> None:
        await self.client.connect()
        logger.info("memorystack: connected")

    async def stop(self) -> None:
        await self.client.close()
        logger.info("memorystack: stopped")


plugin = MemoryStackPlugin()
