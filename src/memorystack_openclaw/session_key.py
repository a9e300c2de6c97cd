"""Decoding of host session keys into an agent identity.

Session keys are opaque strings. Keys issued for agent runs follow
``agent:<agentId>:<rest>`` where ``rest`` is ``subagent:<id>`` for spawned
sub-tasks, or anything else (``main``, a channel id, ...) otherwise. Keys
that do not follow this grammar are kept whole as the session id.
"""

from typing import NamedTuple, Optional

DEFAULT_AGENT_ID = "main"
AGENT_PREFIX = "agent"
SUBAGENT_PREFIX = "subagent:"


class SessionIdentity(NamedTuple):
    agent_id: str
    subagent_id: Optional[str]
    session_id: str


def parse_session_key(session_key: Optional[str]) -> SessionIdentity:
    """
    Decode a session key. Never raises; malformed keys degrade to defaults.

    Examples:
        >>> parse_session_key("agent:research:subagent:9F2c")
        SessionIdentity(agent_id='research', subagent_id='9F2c', session_id='agent:research:subagent:9F2c')
        >>> parse_session_key("telegram:1234")
        SessionIdentity(agent_id='main', subagent_id=None, session_id='telegram:1234')
    """
    if not session_key:
        return SessionIdentity(DEFAULT_AGENT_ID, None, "")

    parts = session_key.split(":")
    if len(parts) < 3 or parts[0] != AGENT_PREFIX:
        return SessionIdentity(DEFAULT_AGENT_ID, None, session_key)

    agent_id = parts[1] or DEFAULT_AGENT_ID
    rest = ":".join(parts[2:])

    subagent_id = None
    if rest.lower().startswith(SUBAGENT_PREFIX):
        subagent_id = rest[len(SUBAGENT_PREFIX):]

    return SessionIdentity(agent_id, subagent_id, session_key)
