"""Normalization of host-supplied turn context.

The host hands every turn-start event a loosely shaped context mapping.
``normalize_context`` turns it into the snapshot the rest of the plugin
reads (recall, capture, tools and slash commands). The snapshot belongs to
one turn and is passed along explicitly; nothing here keeps it around.
"""

from typing import Any, Mapping, Optional

from .session_key import DEFAULT_AGENT_ID, parse_session_key

ContextSnapshot = dict[str, Any]

# Some hosts send the literal key prefix instead of the real agent id.
PLACEHOLDER_AGENT_ID = "agent"


def normalize_context(ctx: Optional[Mapping[str, Any]]) -> ContextSnapshot:
    """
    Build the canonical context snapshot for a turn.

    Applying it to an already normalized snapshot returns an equal snapshot.
    """
    snapshot: ContextSnapshot = dict(ctx or {})
    session_key = snapshot.get("sessionKey")
    identity = parse_session_key(session_key)

    if not snapshot.get("agentId") or snapshot["agentId"] == PLACEHOLDER_AGENT_ID:
        snapshot["agentId"] = identity.agent_id

    if identity.subagent_id:
        snapshot["subagentId"] = identity.subagent_id

    if not snapshot.get("userId") and snapshot.get("SenderId"):
        snapshot["userId"] = snapshot["SenderId"]

    if snapshot.get("groupId"):
        snapshot["teamId"] = snapshot["groupId"]

    if snapshot.get("groupChannel"):
        snapshot["conversationId"] = snapshot["groupChannel"]
    elif not snapshot.get("conversationId") and session_key:
        snapshot["conversationId"] = session_key

    return snapshot


def effective_agent_id(snapshot: Mapping[str, Any]) -> str:
    """Identity memories are attributed to: the subagent when there is one."""
    return snapshot.get("subagentId") or snapshot.get("agentId") or DEFAULT_AGENT_ID


def compact(values: Mapping[str, Any]) -> dict[str, Any]:
    """Drop entries whose value is ``None``."""
    return {k: v for k, v in values.items() if v is not None}
