"""MemoryStack CLI - long-term memory commands for the terminal."""

import asyncio
import logging

import click

from .client import MemoryStackClient
from .config import DEFAULT_MEMORYSTACK_BASE_URL, MEMORYSTACK_API_KEY, MEMORYSTACK_BASE_URL
from .exceptions import MemoryStackError
from .utils import format_confidence, preview

logger = logging.getLogger(__name__)

CLI_SOURCE = "openclaw_cli"
WIPE_LIST_LIMIT = 1000
CONFIRM_TOKEN = "yes"


def _run(ctx: click.Context, action):
    """Run ``action(client)`` against a connected client, exiting 1 on store errors."""
    client = MemoryStackClient(api_key=ctx.obj["api_key"], base_url=ctx.obj["base_url"])

    async def runner():
        async with client:
            return await action(client)

    try:
        return asyncio.run(runner())
    except MemoryStackError as e:
        click.echo(f"Error: {ctx.obj['failure']}: {e.message}", err=True)
        raise SystemExit(1)


@click.group(name="memorystack")
@click.option("--api-key", envvar=MEMORYSTACK_API_KEY, default="", help="MemoryStack API key")
@click.option("--base-url", envvar=MEMORYSTACK_BASE_URL, default=DEFAULT_MEMORYSTACK_BASE_URL,
              help="MemoryStack API URL")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logs")
@click.pass_context
def cli(ctx: click.Context, api_key: str, base_url: str, verbose: bool):
    """MemoryStack long-term memory commands."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = ctx.obj.get("api_key") or api_key
    ctx.obj["base_url"] = ctx.obj.get("base_url") or base_url


@cli.command()
@click.argument("query")
@click.option("--limit", default=5, type=int, help="Max results")
@click.option("--type", "memory_type", default=None, help="Filter by memory type (fact, preference, episode)")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int, memory_type: str):
    """Search long-term memories."""
    logger.debug('memorystack: cli search query="%s" limit=%d', query, limit)
    ctx.obj["failure"] = "Search failed"
    results = _run(ctx, lambda client: client.search(query, limit=limit, memory_type=memory_type))

    if results.count == 0 or not results.results:
        click.echo("No memories found.")
        return

    click.echo(f"Found {results.count} memories:\n")
    for r in results.results:
        memory_type_tag = f" [{r.memory_type}]" if r.memory_type else ""
        click.echo(f"- {r.content}{memory_type_tag}{format_confidence(r.confidence)}")


@cli.command()
@click.pass_context
def stats(ctx: click.Context):
    """View usage statistics."""
    ctx.obj["failure"] = "Failed to get stats"
    result = _run(ctx, lambda client: client.get_stats())

    click.echo("\n📊 MemoryStack Statistics\n")
    click.echo(f"Total Memories:      {result.totals.total_memories}")
    click.echo(f"Total API Calls:     {result.totals.total_api_calls}")
    click.echo(f"This Month's Calls:  {result.usage.current_month_api_calls}/{result.usage.monthly_api_limit}")
    click.echo(f"Plan:                {result.plan_tier or 'Free'}")


@cli.command()
@click.argument("text")
@click.option("--type", "memory_type", default=None, help="Memory type (fact, preference, episode)")
@click.pass_context
def add(ctx: click.Context, text: str, memory_type: str):
    """Save text as a memory."""
    logger.debug('memorystack: cli add "%s"', text[:50])
    ctx.obj["failure"] = "Failed to add memory"
    _run(ctx, lambda client: client.add(
        text,
        memory_type=memory_type,
        metadata={"source": CLI_SOURCE},
    ))
    click.echo(f'✓ Saved: "{preview(text, 60)}"')


@cli.command()
@click.pass_context
def deleteall(ctx: click.Context):
    """Delete ALL your memories (destructive, requires confirmation)."""
    answer = click.prompt(
        "⚠️  This will permanently delete ALL your memories. Type 'yes' to confirm",
        default="",
        show_default=False,
    )
    if answer.strip().lower() != CONFIRM_TOKEN:
        click.echo("Aborted.")
        return

    logger.debug("memorystack: cli wipe confirmed")
    ctx.obj["failure"] = "Failed to wipe memories"

    async def wipe(client: MemoryStackClient):
        memories = await client.list_memories(limit=WIPE_LIST_LIMIT)
        if memories.count == 0 or not memories.results:
            return None
        return await client.delete_memories([m.id for m in memories.results], hard=True)

    result = _run(ctx, wipe)
    if result is None:
        click.echo("No memories to delete.")
        return
    click.echo(f"Wiped {result.deleted_count} memories.")


if __name__ == "__main__":
    cli()
