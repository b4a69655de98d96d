"""Conversation log and history reduction for agent chats."""

import logging
from dataclasses import replace
from typing import Iterator, List, Optional, Sequence, Tuple

from ..models.message import AuthorRole, Message
from ..utils.errors import InvalidSequenceError

logger = logging.getLogger(__name__)


class ConversationLog:
    """
    Append-only, ordered log of chat messages.

    Every appended message carries a sequence number strictly greater than
    the previous one. Messages are never removed or replaced; strategies read
    bounded views produced by a HistoryReducer instead.

    Attributes:
        chat_id: Optional identifier used in log records
    """

    def __init__(self, chat_id: Optional[str] = None):
        self.chat_id = chat_id
        self._messages: List[Message] = []

        logger.debug(f"Initialized ConversationLog for chat: {chat_id or 'unknown'}")

    def append(self, message: Message) -> Message:
        """
        Append a stamped message to the log.

        Args:
            message: Message whose sequence_number is already set

        Returns:
            The appended message

        Raises:
            InvalidSequenceError: If the sequence number does not increase
        """
        last = self.last_sequence_number
        if message.sequence_number <= last:
            raise InvalidSequenceError.out_of_order(message.sequence_number, last)

        self._messages.append(message)

        logger.debug(
            f"Appended message #{message.sequence_number} from "
            f"{message.name or message.role.value}: {message.content[:100]}"
        )
        return message

    def add_message(self, message: Message) -> Message:
        """Stamp `message` with the next sequence number and append it."""
        return self.append(replace(message, sequence_number=self.next_sequence_number))

    def add_user_message(self, content: str, name: Optional[str] = None) -> Message:
        return self.add_message(Message.user(content, name=name))

    @property
    def last_sequence_number(self) -> int:
        return self._messages[-1].sequence_number if self._messages else 0

    @property
    def next_sequence_number(self) -> int:
        return self.last_sequence_number + 1

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def get_latest_message(self, name: Optional[str] = None) -> Optional[Message]:
        """
        Get the most recent message, optionally filtered by author name.

        Args:
            name: Optional author name to filter by

        Returns:
            Most recent Message, or None if there is none
        """
        for message in reversed(self._messages):
            if name is None or message.name == name:
                return message
        return None

    def get_messages_by_author(self, name: str) -> List[Message]:
        return [m for m in self._messages if m.name == name]

    def get_summary(self) -> dict:
        """Count messages per author."""
        counts: dict = {}
        for message in self._messages:
            key = message.name or message.role.value
            counts[key] = counts.get(key, 0) + 1
        return {
            "chat_id": self.chat_id,
            "total_messages": len(self._messages),
            "user_messages": sum(1 for m in self._messages if m.role == AuthorRole.USER),
            "messages_by_author": counts,
        }

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))


class TruncationReducer:
    """
    Keep only the most recent `target_count` messages.

    Used to bound the history a strategy prompt sees; the underlying log is
    never touched.
    """

    def __init__(self, target_count: int = 1):
        if target_count < 1:
            raise ValueError("target_count must be at least 1")
        self.target_count = target_count

    def reduce(self, messages: Sequence[Message]) -> Tuple[Message, ...]:
        messages = tuple(messages)
        if self.target_count >= len(messages):
            return messages
        return messages[-self.target_count:]

    def __repr__(self) -> str:
        return f"TruncationReducer(target_count={self.target_count})"


def reduce(log, policy: Optional[TruncationReducer]) -> Tuple[Message, ...]:
    """
    Project `log` through `policy`.

    Args:
        log: ConversationLog or any sequence of messages
        policy: Reducer to apply; None returns the full history

    Returns:
        Tuple of messages in log order
    """
    messages = log.messages if isinstance(log, ConversationLog) else tuple(log)
    if policy is None:
        return messages
    return policy.reduce(messages)
