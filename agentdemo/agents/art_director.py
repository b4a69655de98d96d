"""Art director agent reviewing copy for approval."""

from .base import ChatCompletionAgent
from ..utils.bedrock_client import BedrockClient


class ArtDirectorAgent(ChatCompletionAgent):
    """
    Reviews the copywriter's proposal.

    The only agent whose turns are checked for approval.
    """

    def __init__(self, client: BedrockClient, name: str = "ArtDirector"):
        super().__init__(
            name=name,
            instructions=self._build_instructions(),
            client=client,
        )

    def _build_instructions(self) -> str:
        return """You are an art director who has opinions about copywriting born of a love for David Ogilvy.
The goal is to determine if the given copy is acceptable to print.
If so, state that it is approved.
If not, provide insight on how to refine suggested copy without examples."""
