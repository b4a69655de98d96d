"""Base agent classes for the chat demos (AWS Bedrock)."""

import logging
from dataclasses import replace
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from semantic_kernel import Kernel

from ..models.message import AuthorRole, Message
from ..utils.bedrock_client import BedrockClient

logger = logging.getLogger(__name__)


class BaseChatAgent(ABC):
    """
    Base class for chat agents.

    An agent is configuration (name, instructions) plus the ability to turn a
    conversation history into one reply. It keeps no per-conversation state.

    Attributes:
        name: Unique agent name
        instructions: System instructions for the agent
    """

    def __init__(self, name: str, instructions: str):
        self.name = name
        self.instructions = instructions

    @abstractmethod
    async def invoke(self, history: Sequence[Message]) -> Message:
        """Produce the agent's reply to `history`."""
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class ChatCompletionAgent(BaseChatAgent):
    """
    Agent backed by a chat completion client.

    Plugins registered on the agent's kernel are offered to the model as
    tools; the client runs the tool calls and returns the final reply.

    Attributes:
        client: BedrockClient (or any object with the same `complete` method)
        kernel: Semantic Kernel holding the agent's plugins
    """

    def __init__(
        self,
        name: str,
        instructions: str,
        client: BedrockClient,
        kernel: Optional[Kernel] = None,
        plugins: Optional[List[object]] = None,
    ):
        super().__init__(name=name, instructions=instructions)
        self.client = client
        self.kernel = kernel or Kernel()

        for plugin in plugins or []:
            self.add_plugin(plugin)

        logger.info(
            f"Initialized {self.__class__.__name__}: {name} with "
            f"{len(self.kernel.plugins)} plugins"
        )

    def add_plugin(self, plugin: object, plugin_name: Optional[str] = None) -> None:
        name = plugin_name or getattr(plugin, "plugin_name", None) or plugin.__class__.__name__
        self.kernel.add_plugin(plugin, plugin_name=name)
        logger.debug(f"{self.name}: registered plugin {name}")

    def get_plugin_names(self) -> List[str]:
        return list(self.kernel.plugins.keys())

    async def invoke(self, history: Sequence[Message]) -> Message:
        """
        Generate a reply to the full history.

        Raises:
            RemoteCallError: If the model call fails
        """
        try:
            response = await self.client.complete(
                history,
                instructions=self.instructions,
                kernel=self.kernel if self.kernel.plugins else None,
                agent_name=self.name,
            )
        except Exception as e:
            logger.error(f"Error getting response from {self.name}: {str(e)}")
            raise

        logger.debug(f"{self.name} generated response: {response.content[:100]}...")
        return replace(response, role=AuthorRole.AGENT, name=self.name)
