"""MemoryStack plugin - long-term memory for OpenClaw agents."""

from .capture import build_capture_payload, capture_turn, collect_capture_texts
from .client import MemoryStackClient
from .config import MemoryStackConfig, parse_config
from .context import effective_agent_id, normalize_context
from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidResponseError,
    MemoryStackError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TransportError,
    ValidationError,
)
from .models import CommandReply, MemoryRecord, SearchFilter, SearchResponse, ToolResult
from .plugin import MemoryStackPlugin, TurnStart, plugin
from .recall import build_recall_context, recall_for_turn, render_memories
from .scope import SearchParams, resolve_search_filter
from .session_key import SessionIdentity, parse_session_key
from .transcript import extract_last_turn
from .types import AnalysisDepth, MemoryType, SearchScope

__version__ = "0.1.0"

__all__ = [
    # Plugin
    "MemoryStackPlugin",
    "TurnStart",
    "plugin",
    # Client
    "MemoryStackClient",
    # Config
    "MemoryStackConfig",
    "parse_config",
    # Pipeline
    "parse_session_key",
    "SessionIdentity",
    "normalize_context",
    "effective_agent_id",
    "extract_last_turn",
    "collect_capture_texts",
    "build_capture_payload",
    "capture_turn",
    "render_memories",
    "build_recall_context",
    "recall_for_turn",
    "SearchParams",
    "resolve_search_filter",
    # Models
    "MemoryRecord",
    "SearchFilter",
    "SearchResponse",
    "ToolResult",
    "CommandReply",
    # Types
    "MemoryType",
    "SearchScope",
    "AnalysisDepth",
    # Exceptions
    "MemoryStackError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "ServerError",
    "TransportError",
    "InvalidResponseError",
]
