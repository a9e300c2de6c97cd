"""Recall of stored memories ahead of an agent turn."""

import logging
import math
from typing import Any, Iterable, Mapping, Optional

from .client import MemoryStackClient
from .config import MemoryStackConfig
from .models import MemoryRecord
from .scope import SearchParams, resolve_search_filter
from .types import MemoryType

logger = logging.getLogger(__name__)

MAX_CONTEXT_CHARS = 2000
TRUNCATION_MARKER = "\n...(truncated)"
MIN_PROMPT_CHARS = 10
HIGH_CONFIDENCE = 0.8

CONTEXT_OPEN_TAG = "<memorystack-context>"
CONTEXT_CLOSE_TAG = "</memorystack-context>"
USAGE_INSTRUCTION = (
    "Recalled context about the user: use it naturally when relevant, "
    "but don't force it into every response or assume beyond what's stated."
)

CATEGORY_LABELS = {
    MemoryType.FACT.value: "📋 Facts",
    MemoryType.PREFERENCE.value: "💜 Preferences",
    MemoryType.EPISODE.value: "📅 Recent Context",
    MemoryType.PROCEDURE.value: "🔧 Procedures",
    MemoryType.BELIEF.value: "💭 Beliefs",
}
OTHER_LABEL = "Other"


def _bullet(record: MemoryRecord) -> str:
    suffix = ""
    if record.confidence is not None and record.confidence >= HIGH_CONFIDENCE:
        suffix = f" ({math.floor(record.confidence * 100 + 0.5)}%)"
    return f"- {record.content}{suffix}"


def render_memories(records: Iterable[MemoryRecord], budget: int = MAX_CONTEXT_CHARS) -> str:
    """
    Render records grouped by category, cut to ``budget`` characters.

    Known categories appear in the order they are first seen; records of
    unknown or missing type are collected under "Other", which is always
    rendered last. When the rendering is longer than ``budget`` it is cut
    at that character and ``TRUNCATION_MARKER`` is appended.
    """
    groups: dict[str, list[MemoryRecord]] = {}
    other: list[MemoryRecord] = []
    for record in records:
        if record.memory_type in CATEGORY_LABELS:
            groups.setdefault(record.memory_type, []).append(record)
        else:
            other.append(record)

    sections = []
    for memory_type, items in groups.items():
        lines = "\n".join(_bullet(r) for r in items)
        sections.append(f"## {CATEGORY_LABELS[memory_type]}\n{lines}")
    if other:
        lines = "\n".join(_bullet(r) for r in other)
        sections.append(f"## {OTHER_LABEL}\n{lines}")

    text = "\n\n".join(sections)
    if len(text) > budget:
        text = text[:budget] + TRUNCATION_MARKER
    return text


def wrap_context(body: str) -> str:
    """Wrap rendered memories in the envelope injected ahead of the prompt."""
    return f"{CONTEXT_OPEN_TAG}\n{USAGE_INSTRUCTION}\n\n{body}\n{CONTEXT_CLOSE_TAG}"


def build_recall_context(records: Iterable[MemoryRecord]) -> str:
    return wrap_context(render_memories(records))


async def recall_for_turn(
    client: MemoryStackClient,
    event: Mapping[str, Any],
    context: Mapping[str, Any],
    config: MemoryStackConfig,
) -> Optional[str]:
    """
    Search memories relevant to the turn's prompt and build the context block.

    Returns ``None`` when there is nothing to inject. Failures are logged
    and never propagate into the agent's turn.
    """
    prompt = event.get("prompt")
    if not isinstance(prompt, str) or len(prompt) < MIN_PROMPT_CHARS:
        return None

    logger.debug("memorystack: recalling for prompt (%d chars)", len(prompt))

    try:
        search_filter = resolve_search_filter(SearchParams(query=prompt), context)
        results = await client.search(
            prompt,
            limit=config.max_recall_results,
            **search_filter.to_search_kwargs(),
        )
        if results.count == 0 or not results.results:
            logger.debug("memorystack: no memories to inject")
            return None

        block = build_recall_context(results.results)
        logger.debug("memorystack: injecting %d memories (%d chars)", len(results.results), len(block))
        return block
    except Exception as e:
        logger.error("memorystack: recall failed: %s", e)
        return None
