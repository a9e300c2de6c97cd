"""Type definitions and enums for the MemoryStack plugin."""

from enum import Enum


class MemoryType(str, Enum):
    """Memory categories understood by the store."""

    FACT = "fact"  # Stable facts about the user or world
    PREFERENCE = "preference"  # Likes, dislikes, settings
    EPISODE = "episode"  # Things that happened recently
    PROCEDURE = "procedure"  # How to do things
    BELIEF = "belief"  # Opinions held by the user


class SearchScope(str, Enum):
    """Axis along which a search is restricted."""

    GLOBAL = "global"  # No agent or team restriction (default)
    AGENT = "agent"  # Memories attributed to the current agent/subagent
    TEAM = "team"  # Memories from the current group


class AnalysisDepth(str, Enum):
    """Thoroughness of a reflection pass."""

    SHALLOW = "shallow"
    DEEP = "deep"
