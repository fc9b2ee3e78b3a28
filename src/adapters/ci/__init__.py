"""CI platform bindings — outputs, environment export, PATH, annotations."""

from src.adapters.ci.base import CIPlatform
from src.adapters.ci.github import GitHubActions
from src.adapters.ci.memory import MemoryPlatform

__all__ = [
    "CIPlatform",
    "GitHubActions",
    "MemoryPlatform",
]
