"""Helpers for reading host transcripts."""

from typing import Any, Sequence

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"


def extract_last_turn(messages: Sequence[Any]) -> Sequence[Any]:
    """
    Return the most recent exchange: the last user message and everything after it.

    A transcript without any user message is returned unchanged.
    """
    for idx in range(len(messages) - 1, -1, -1):
        msg = messages[idx]
        if isinstance(msg, dict) and msg.get("role") == USER_ROLE:
            return messages[idx:]
    return messages


def flatten_content(content: Any) -> str:
    """
    Flatten message content to plain text.

    Strings are returned as-is. For a list of content blocks, the text of
    ``{"type": "text"}`` blocks is joined with newlines; images, tool calls
    and other block kinds are dropped.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, (list, tuple)):
        parts = [
            block["text"]
            for block in content
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
        ]
        return "\n".join(parts)
    return ""
