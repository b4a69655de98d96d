"""Chat agents for the demos."""

from .base import BaseChatAgent, ChatCompletionAgent
from .host import MenuHostAgent
from .copywriter import CopyWriterAgent
from .art_director import ArtDirectorAgent

__all__ = [
    "BaseChatAgent",
    "ChatCompletionAgent",
    "MenuHostAgent",
    "CopyWriterAgent",
    "ArtDirectorAgent",
]
