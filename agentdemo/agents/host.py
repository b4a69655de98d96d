"""Host agent that answers questions about the menu."""

from typing import Optional

from .base import ChatCompletionAgent
from ..plugins.menu import MenuPlugin
from ..utils.bedrock_client import BedrockClient


class MenuHostAgent(ChatCompletionAgent):
    """
    Single agent with the menu plugin attached.

    Plugins used:
    - menu: get_menu, get_specials, get_item_price
    """

    def __init__(self, client: BedrockClient, menu: Optional[MenuPlugin] = None):
        super().__init__(
            name="HostAgent",
            instructions="Answer questions about the menu.",
            client=client,
            plugins=[menu or MenuPlugin()],
        )
