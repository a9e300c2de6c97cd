"""Capture of the last conversational turn into the memory store."""

import logging
import re
from typing import Any, Iterable, Mapping, Optional, Sequence

from .client import MemoryStackClient
from .context import compact, effective_agent_id
from .recall import CONTEXT_CLOSE_TAG, CONTEXT_OPEN_TAG
from .transcript import ASSISTANT_ROLE, USER_ROLE, extract_last_turn, flatten_content
from .utils import utc_now_iso

logger = logging.getLogger(__name__)

MIN_CAPTURE_CHARS = 10
MAX_CAPTURE_CHARS = 500
CAPTURE_SOURCE = "clawdbot_auto_capture"

# Context blocks injected by recall must not be stored again.
_INJECTED_CONTEXT = re.compile(
    re.escape(CONTEXT_OPEN_TAG) + r".*?" + re.escape(CONTEXT_CLOSE_TAG) + r"\s*",
    re.DOTALL,
)


def strip_injected_context(text: str) -> str:
    return _INJECTED_CONTEXT.sub("", text).strip()


def filter_notes(notes: Iterable[str]) -> list[str]:
    """
    Strip injected context from each note and keep those of storable size.

    Notes shorter than ``MIN_CAPTURE_CHARS`` or longer than
    ``MAX_CAPTURE_CHARS`` after stripping are dropped.
    """
    kept = []
    for note in notes:
        note = strip_injected_context(note)
        if MIN_CAPTURE_CHARS <= len(note) <= MAX_CAPTURE_CHARS:
            kept.append(note)
    return kept


def collect_capture_texts(turn: Sequence[Any]) -> list[str]:
    """Turn user and assistant messages into role-tagged notes worth storing."""
    wrapped = []
    for msg in turn:
        if not isinstance(msg, dict):
            continue
        role = msg.get("role")
        if role not in (USER_ROLE, ASSISTANT_ROLE):
            continue

        text = flatten_content(msg.get("content"))
        if text:
            wrapped.append(f"[role: {role}]\n{text}\n[{role}:end]")
    return filter_notes(wrapped)


def build_capture_payload(messages: Sequence[Any]) -> Optional[str]:
    """Payload for the last turn of ``messages``, or ``None`` when nothing survives filtering."""
    captured = collect_capture_texts(extract_last_turn(messages))
    if not captured:
        return None
    return "\n\n".join(captured)


async def capture_turn(
    client: MemoryStackClient,
    event: Mapping[str, Any],
    context: Mapping[str, Any],
) -> None:
    """
    Store the last exchange of a finished turn.

    Runs in the background of the agent: any failure is logged and dropped.
    """
    messages = event.get("messages")
    if not event.get("success") or not isinstance(messages, list) or not messages:
        return

    content = build_capture_payload(messages)
    if content is None:
        return

    session_key = context.get("sessionKey")
    agent_id = effective_agent_id(context)
    metadata = compact({
        "source": CAPTURE_SOURCE,
        "session_id": session_key,
        "timestamp": utc_now_iso(),
        "user_id": context.get("userId"),
        "agent_id": agent_id,
        "provider": context.get("Provider"),
        "model": context.get("Model"),
        "sender_name": context.get("SenderName"),
    })

    logger.debug("memorystack: capturing %d chars", len(content))

    try:
        await client.add(
            content,
            session_id=session_key,
            agent_id=agent_id,
            user_id=context.get("userId"),
            team_id=context.get("teamId"),
            conversation_id=context.get("conversationId"),
            metadata=metadata,
        )
        logger.debug("memorystack: captured turn successfully")
    except Exception as e:
        logger.error("memorystack: capture failed: %s", e)
