"""Turn-taking group chat orchestrator."""

import asyncio
import logging
from dataclasses import replace
from typing import AsyncIterator, Optional, Sequence

from ..models.message import AuthorRole, Message
from ..utils.errors import ChatStateError
from .conversation import ConversationLog
from .state import ChatState, CompletionReason, OrchestrationState
from .strategies import SelectionStrategy, TerminationStrategy

logger = logging.getLogger(__name__)


class GroupChatOrchestrator:
    """
    Runs a multi-agent conversation one turn at a time.

    Each turn selects an agent, lets it generate from the full conversation
    log, appends the reply, and asks the termination strategy whether to
    stop. Replies are yielded as soon as they are appended.

    A chat runs once. After it reaches a terminal state, build a new
    orchestrator to start over.

    Attributes:
        agents: Participating agents
        selection_strategy: Picks the next speaker
        termination_strategy: Decides when to stop
        state: OrchestrationState holding the log and turn counter
    """

    def __init__(
        self,
        agents: Sequence,
        selection_strategy: SelectionStrategy,
        termination_strategy: TerminationStrategy,
        chat_id: Optional[str] = None,
    ):
        names = [agent.name for agent in agents]
        if sorted(names) != sorted(selection_strategy.eligible_names):
            raise ValueError(
                f"Agents {names} do not match the selection roster "
                f"{selection_strategy.eligible_names}"
            )

        self.agents = tuple(agents)
        self.selection_strategy = selection_strategy
        self.termination_strategy = termination_strategy
        self.state = OrchestrationState(log=ConversationLog(chat_id=chat_id))
        self._cancel_requested = False

        logger.info(
            f"Initialized GroupChatOrchestrator with agents "
            f"{[agent.name for agent in self.agents]}"
        )

    @property
    def log(self) -> ConversationLog:
        return self.state.log

    @property
    def is_complete(self) -> bool:
        return self.state.is_complete

    @property
    def completion_reason(self) -> Optional[CompletionReason]:
        return self.state.completion_reason

    def add_message(self, message: Message) -> Message:
        """
        Seed the conversation before the chat starts.

        Raises:
            ChatStateError: If the chat is already running or finished
        """
        if self.state.state != ChatState.NOT_STARTED:
            if self.state.state.is_terminal:
                raise ChatStateError.already_completed(self.state.state.value)
            raise ChatStateError.already_running()
        return self.log.add_message(message)

    def cancel(self) -> None:
        """Stop the chat before the next turn starts."""
        self._cancel_requested = True
        logger.info("Cancellation requested; chat stops before the next turn")

    async def invoke(self) -> AsyncIterator[Message]:
        """
        Run turns until the termination strategy stops the chat.

        Yields:
            Each agent Message right after it is appended to the log

        Raises:
            ChatStateError: If the chat already ran
            RemoteCallError: If an agent or strategy call fails; the chat is
                left in the FAILED state
        """
        if self.state.state != ChatState.NOT_STARTED:
            if self.state.state.is_terminal:
                raise ChatStateError.already_completed(self.state.state.value)
            raise ChatStateError.already_running()

        self.state.state = ChatState.RUNNING
        logger.info(f"Starting group chat with {len(self.log)} seed message(s)")

        try:
            while True:
                if self._cancel_requested:
                    self._finish(ChatState.CANCELLED, CompletionReason.CANCELLED)
                    return

                agent = await self.selection_strategy.select_next(self.state)
                logger.info(f"Turn {self.state.turn_count + 1}: {agent.name}")

                response = await agent.invoke(self.log.messages)
                message = self.log.add_message(self._as_agent_message(agent, response))

                self.state.turn_count += 1
                self.state.last_speaker = agent.name

                yield message

                decision = await self.termination_strategy.should_terminate(self.state)
                if decision:
                    self._finish(ChatState.COMPLETED, decision.reason)
                    return

        except (asyncio.CancelledError, GeneratorExit):
            self._finish(ChatState.CANCELLED, CompletionReason.CANCELLED)
            raise
        except Exception as e:
            logger.error(f"Group chat failed on turn {self.state.turn_count + 1}: {str(e)}")
            self.state.error = e
            self._finish(ChatState.FAILED, CompletionReason.FAILED)
            raise

    def _as_agent_message(self, agent, response: Message) -> Message:
        # Agents own their name on the log regardless of what the client returned
        return replace(response, role=AuthorRole.AGENT, name=agent.name)

    def _finish(self, state: ChatState, reason: Optional[CompletionReason]) -> None:
        if self.state.state.is_terminal:
            return
        self.state.state = state
        self.state.completion_reason = reason
        logger.info(
            f"Group chat {state.value} after {self.state.turn_count} turns "
            f"(reason={reason.value if reason else None})"
        )
