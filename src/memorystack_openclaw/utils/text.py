"""Text helpers shared by tools, commands and the CLI."""

from typing import Optional


def preview(text: str, limit: int) -> str:
    """Shorten ``text`` to ``limit`` characters, marking the cut with an ellipsis."""
    return f"{text[:limit]}…" if len(text) > limit else text


def format_confidence(confidence: Optional[float]) -> str:
    """Render a confidence score as `` (NN%)``; empty when unset or zero."""
    if not confidence:
        return ""
    return f" ({confidence * 100:.0f}%)"
