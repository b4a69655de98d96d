"""Copywriter agent proposing and refining ad copy."""

from .base import ChatCompletionAgent
from ..utils.bedrock_client import BedrockClient


class CopyWriterAgent(ChatCompletionAgent):
    """Proposes one piece of copy per turn and refines it on feedback."""

    def __init__(self, client: BedrockClient, name: str = "CopyWriter"):
        super().__init__(
            name=name,
            instructions=self._build_instructions(),
            client=client,
        )

    def _build_instructions(self) -> str:
        return """You are a copywriter with ten years of experience and are known for brevity and a dry humor.
The goal is to refine and decide on the single best copy as an expert in the field.
Only provide a single proposal per response.
Never delimit the response with quotation marks.
You're laser focused on the goal at hand.
Don't waste time with chit chat.
Consider suggestions when refining an idea."""
