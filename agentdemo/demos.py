"""
Demo entry points.

Two programs share this module: a single host agent answering menu
questions with a plugin, and a copywriter/art director pair taking turns
until the copy is approved or the iteration cap is hit.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from .agents import ArtDirectorAgent, CopyWriterAgent, MenuHostAgent
from .models.message import Message
from .orchestration import (
    ConversationLog,
    GroupChatOrchestrator,
    SelectionStrategy,
    StrategyFunction,
    TerminationStrategy,
    TruncationReducer,
)
from .orchestration.prompts import TERMINATION_TEMPLATE, build_selection_template
from .utils.bedrock_client import BedrockClient
from .utils.config import Config, GroupChatConfig
from .utils.console import print_chat_message
from .utils.logging import clear_context, set_context, setup_logging

logger = logging.getLogger(__name__)

MENU_QUESTION = "What is the special soup and how much does it cost?"
COPY_CONCEPT = "concept: maps made out of egg cartons. make 4 of them"


def load_runtime(config_path: str = "config.yaml") -> tuple[Config, BedrockClient]:
    """Load config, configure logging and build the Bedrock client."""
    config = Config.load(config_path)
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file or None,
    )
    return config, BedrockClient.from_config(config)


async def run_menu_demo(client: BedrockClient, question: str = MENU_QUESTION) -> ConversationLog:
    """
    Ask the host agent one question and print the exchange.

    Returns:
        The conversation log (user question followed by the agent replies)
    """
    log = ConversationLog(chat_id=uuid.uuid4().hex[:8])
    set_context(demo="menu", chat_id=log.chat_id)
    logger.info(f"Asking {MenuHostAgent.__name__}: {question}")
    agent = MenuHostAgent(client)

    print_chat_message(log.add_user_message(question))

    response = await agent.invoke(log.messages)
    print_chat_message(log.add_message(response))

    return log


def build_copy_review_chat(
    client: BedrockClient,
    settings: Optional[GroupChatConfig] = None,
    chat_id: Optional[str] = None,
) -> GroupChatOrchestrator:
    """
    Wire the copywriter and art director into a group chat.

    The writer always speaks first, only the art director can approve, and
    both strategies look at the most recent message only.
    """
    settings = settings or GroupChatConfig()

    writer = CopyWriterAgent(client)
    reviewer = ArtDirectorAgent(client)
    strategy_reducer = TruncationReducer(settings.history_window)

    selection = SelectionStrategy(
        function=StrategyFunction(
            "selection",
            build_selection_template(writer.name, reviewer.name),
            client,
        ),
        eligible_agents=[writer, reviewer],
        initial_agent=writer,
        history_reducer=strategy_reducer,
        evaluate_name_only=settings.evaluate_name_only,
    )

    termination = TerminationStrategy(
        function=StrategyFunction("termination", TERMINATION_TEMPLATE, client),
        maximum_iterations=settings.maximum_iterations,
        authorized_agents=[reviewer],
        history_reducer=strategy_reducer,
    )

    return GroupChatOrchestrator(
        agents=[writer, reviewer],
        selection_strategy=selection,
        termination_strategy=termination,
        chat_id=chat_id,
    )


async def run_copy_review(
    client: BedrockClient,
    concept: str = COPY_CONCEPT,
    settings: Optional[GroupChatConfig] = None,
) -> GroupChatOrchestrator:
    """
    Run the copy review chat to completion, printing each message.

    Returns:
        The finished orchestrator; inspect `completion_reason` for the outcome

    Raises:
        RemoteCallError: If a model call fails; the chat is left FAILED
    """
    chat_id = uuid.uuid4().hex[:8]
    set_context(demo="copy-review", chat_id=chat_id)

    chat = build_copy_review_chat(client, settings, chat_id=chat_id)
    print_chat_message(chat.add_message(Message.user(concept)))

    try:
        async for response in chat.invoke():
            print_chat_message(response)
    finally:
        reason = chat.completion_reason.value if chat.completion_reason else "none"
        print(f"\n[IS COMPLETED: {chat.is_complete}] ({reason})")
        logger.info(f"Copy review finished: state={chat.state.state.value}, reason={reason}")
        clear_context()

    return chat
