"""Prompt-driven selection and termination strategies for agent group chats."""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models.message import Message
from ..utils.errors import StrategyParseError
from .conversation import TruncationReducer, reduce
from .state import CONTINUE, CompletionReason, OrchestrationState, TerminationDecision

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{\{\$(\w+)\}\}")


def format_history(messages: Sequence[Message], name_only: bool = False) -> str:
    """
    Render a history view for a strategy prompt.

    Args:
        messages: Reduced history
        name_only: Drop message content and keep only role and author name

    Returns:
        JSON array, one object per message
    """
    rendered: List[Dict[str, Any]] = []
    for message in messages:
        entry: Dict[str, Any] = {"role": message.role.value, "name": message.name or ""}
        if not name_only:
            entry["content"] = message.content
        rendered.append(entry)
    return json.dumps(rendered, indent=2, ensure_ascii=False)


def parse_termination_result(raw: Optional[str]) -> bool:
    """True iff the response contains "yes", case-insensitively."""
    return bool(raw) and "yes" in raw.lower()


def parse_selection_result(raw: Optional[str], eligible_names: Iterable[str]) -> str:
    """
    Parse a selection response into an agent name.

    Raises:
        StrategyParseError: If the trimmed text is empty or names no eligible agent
    """
    names = list(eligible_names)
    name = (raw or "").strip()
    if not name or name not in names:
        raise StrategyParseError.unknown_agent(raw or "", names)
    return name


class StrategyFunction:
    """
    A single-purpose prompt evaluated with one model call.

    The template uses `{{$name}}` placeholders that are filled from the
    keyword arguments passed to `invoke`.

    Attributes:
        name: Label used in log records
        template: Prompt template
        client: Language model client exposing `complete(history, instructions)`
    """

    def __init__(self, name: str, template: str, client, instructions: str = ""):
        self.name = name
        self.template = template
        self.client = client
        self.instructions = instructions

    def render(self, **arguments: str) -> str:
        def substitute(match: "re.Match") -> str:
            key = match.group(1)
            if key not in arguments:
                raise KeyError(f"Missing value for prompt variable '{key}' in {self.name}")
            return str(arguments[key])

        return _PLACEHOLDER.sub(substitute, self.template)

    async def invoke(self, **arguments: str) -> str:
        """
        Render the template and return the raw model text.

        Raises:
            RemoteCallError: If the model call fails
        """
        prompt = self.render(**arguments)
        logger.debug(f"Invoking strategy function '{self.name}' ({len(prompt)} chars)")

        response = await self.client.complete([Message.user(prompt)], instructions=self.instructions)
        text = response.content or ""

        logger.debug(f"Strategy function '{self.name}' returned: {text[:100]!r}")
        return text


class SelectionStrategy:
    """
    Chooses which agent speaks next.

    Turn 0 always goes to `initial_agent`. Later turns ask the selection
    function; a response that names no eligible agent falls back to the agent
    after the last speaker in `eligible_agents` order.

    The "no agent speaks twice in a row" rule lives only in the prompt.
    """

    def __init__(
        self,
        function: StrategyFunction,
        eligible_agents: Sequence,
        initial_agent=None,
        history_reducer: Optional[TruncationReducer] = None,
        evaluate_name_only: bool = False,
        history_variable_name: str = "history",
        agents_variable_name: str = "agents",
    ):
        if not eligible_agents:
            raise ValueError("SelectionStrategy requires at least one eligible agent")

        names = [agent.name for agent in eligible_agents]
        if len(set(names)) != len(names):
            raise ValueError(f"Agent names must be unique: {names}")
        if initial_agent is not None and initial_agent.name not in names:
            raise ValueError(f"Initial agent '{initial_agent.name}' is not eligible")

        self.function = function
        self.eligible_agents = tuple(eligible_agents)
        self.initial_agent = initial_agent
        self.history_reducer = history_reducer
        self.evaluate_name_only = evaluate_name_only
        self.history_variable_name = history_variable_name
        self.agents_variable_name = agents_variable_name

        logger.info(
            f"Initialized SelectionStrategy: agents={names}, "
            f"initial={initial_agent.name if initial_agent else None}, "
            f"name_only={evaluate_name_only}"
        )

    @property
    def eligible_names(self) -> List[str]:
        return [agent.name for agent in self.eligible_agents]

    def get_agent(self, name: str):
        for agent in self.eligible_agents:
            if agent.name == name:
                return agent
        return None

    async def select_next(self, state: OrchestrationState):
        """Return the agent that takes the next turn."""
        if state.turn_count == 0 and self.initial_agent is not None:
            logger.info(f"Turn 1: initial agent {self.initial_agent.name}")
            return self.initial_agent

        history = reduce(state.log, self.history_reducer)
        raw = await self.function.invoke(**{
            self.history_variable_name: format_history(history, name_only=self.evaluate_name_only),
            self.agents_variable_name: "\n".join(f"- {name}" for name in self.eligible_names),
        })

        try:
            name = parse_selection_result(raw, self.eligible_names)
        except StrategyParseError as e:
            fallback = self.round_robin_after(state.last_speaker)
            logger.warning(
                f"Selection fallback: {e}; selecting {fallback.name} "
                f"after {state.last_speaker or 'nobody'}"
            )
            return fallback

        logger.info(f"Turn {state.turn_count + 1}: selected {name}")
        return self.get_agent(name)

    def round_robin_after(self, last_speaker: Optional[str]):
        names = self.eligible_names
        if last_speaker not in names:
            return self.eligible_agents[0]
        return self.eligible_agents[(names.index(last_speaker) + 1) % len(names)]


class TerminationStrategy:
    """
    Decides whether the chat should stop after a turn.

    Only messages from `authorized_agents` are evaluated; other turns never
    cost a model call. `authorized_agents=None` authorizes every agent.
    Reaching `maximum_iterations` forces termination with its own reason.
    """

    def __init__(
        self,
        function: StrategyFunction,
        maximum_iterations: int = 10,
        authorized_agents: Optional[Sequence] = None,
        history_reducer: Optional[TruncationReducer] = None,
        history_variable_name: str = "history",
    ):
        if maximum_iterations < 1:
            raise ValueError("maximum_iterations must be at least 1")

        self.function = function
        self.maximum_iterations = maximum_iterations
        self.authorized_names = (
            None if authorized_agents is None
            else frozenset(agent.name for agent in authorized_agents)
        )
        self.history_reducer = history_reducer
        self.history_variable_name = history_variable_name

        logger.info(
            f"Initialized TerminationStrategy: maximum_iterations={maximum_iterations}, "
            f"authorized={sorted(self.authorized_names) if self.authorized_names is not None else 'all'}"
        )

    def is_authorized(self, name: Optional[str]) -> bool:
        if self.authorized_names is None:
            return name is not None
        return name in self.authorized_names

    async def should_terminate(self, state: OrchestrationState) -> TerminationDecision:
        if state.turn_count >= self.maximum_iterations:
            logger.info(f"Terminating: maximum iterations ({self.maximum_iterations}) reached")
            return TerminationDecision(True, CompletionReason.MAX_ITERATIONS_REACHED)

        if not self.is_authorized(state.last_speaker):
            return CONTINUE

        history = reduce(state.log, self.history_reducer)
        raw = await self.function.invoke(**{self.history_variable_name: format_history(history)})

        if parse_termination_result(raw):
            logger.info(f"Terminating: {state.last_speaker} approved after {state.turn_count} turns")
            return TerminationDecision(True, CompletionReason.APPROVED)

        return CONTINUE
