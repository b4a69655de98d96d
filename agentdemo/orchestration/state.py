"""Orchestration state for the group chat control loop."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .conversation import ConversationLog


class ChatState(Enum):
    """Lifecycle of a group chat."""
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ChatState.COMPLETED, ChatState.FAILED, ChatState.CANCELLED)


class CompletionReason(Enum):
    """Why a chat stopped issuing turns."""
    APPROVED = "approved"
    MAX_ITERATIONS_REACHED = "max_iterations_reached"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TerminationDecision:
    """
    Result of a termination check.

    Truthy when the chat should stop; `reason` says why.
    """
    should_terminate: bool
    reason: Optional[CompletionReason] = None

    def __bool__(self) -> bool:
        return self.should_terminate


CONTINUE = TerminationDecision(False)


@dataclass
class OrchestrationState:
    """
    Mutable state owned by a GroupChatOrchestrator.

    Attributes:
        log: Canonical conversation log
        turn_count: Number of agent turns taken so far
        last_speaker: Name of the agent that spoke last (None before turn 1)
        state: Current lifecycle state
        completion_reason: Set once the chat reaches a terminal state
        error: Exception that moved the chat to FAILED, if any
    """
    log: ConversationLog = field(default_factory=ConversationLog)
    turn_count: int = 0
    last_speaker: Optional[str] = None
    state: ChatState = ChatState.NOT_STARTED
    completion_reason: Optional[CompletionReason] = None
    error: Optional[BaseException] = None

    @property
    def is_complete(self) -> bool:
        return self.state.is_terminal
