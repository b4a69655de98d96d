"""Orchestration layer for multi-agent group chats."""

from .conversation import ConversationLog, TruncationReducer, reduce
from .state import ChatState, CompletionReason, OrchestrationState, TerminationDecision
from .strategies import (
    SelectionStrategy,
    StrategyFunction,
    TerminationStrategy,
    format_history,
    parse_selection_result,
    parse_termination_result,
)
from .group_chat import GroupChatOrchestrator

__all__ = [
    "ConversationLog",
    "TruncationReducer",
    "reduce",
    "ChatState",
    "CompletionReason",
    "OrchestrationState",
    "TerminationDecision",
    "SelectionStrategy",
    "StrategyFunction",
    "TerminationStrategy",
    "format_history",
    "parse_selection_result",
    "parse_termination_result",
    "GroupChatOrchestrator",
]
