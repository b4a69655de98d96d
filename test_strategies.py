"""Tests for selection and termination strategies."""

import asyncio
import json

import pytest

from agentdemo.models.message import Message
from agentdemo.orchestration.conversation import ConversationLog, TruncationReducer
from agentdemo.orchestration.state import CompletionReason, OrchestrationState
from agentdemo.orchestration.strategies import (
    SelectionStrategy,
    StrategyFunction,
    TerminationStrategy,
    format_history,
    parse_selection_result,
    parse_termination_result,
)
from agentdemo.utils.errors import RemoteCallError, StrategyParseError


class _Agent:
    def __init__(self, name):
        self.name = name


WRITER = _Agent("CopyWriter")
REVIEWER = _Agent("ArtDirector")


def _state(turn_count, last_speaker, *contents):
    log = ConversationLog()
    log.add_user_message("concept: egg carton maps")
    for name, content in contents:
        log.add_message(Message.agent(name, content))
    return OrchestrationState(log=log, turn_count=turn_count, last_speaker=last_speaker)


def _selection(client, **kwargs):
    return SelectionStrategy(
        function=StrategyFunction("selection", "Pick from:\n{{$agents}}\nHistory:\n{{$history}}", client),
        eligible_agents=[WRITER, REVIEWER],
        initial_agent=kwargs.pop("initial_agent", WRITER),
        history_reducer=TruncationReducer(1),
        **kwargs,
    )


def _termination(client, maximum_iterations=10, authorized=(REVIEWER,)):
    return TerminationStrategy(
        function=StrategyFunction("termination", "Approved?\n{{$history}}", client),
        maximum_iterations=maximum_iterations,
        authorized_agents=list(authorized),
        history_reducer=TruncationReducer(1),
    )


@pytest.mark.parametrize("raw,expected", [
    ("yes", True),
    ("YES.", True),
    ("Yes, it has been approved", True),
    ("no", False),
    ("", False),
    (None, False),
])
def test_parse_termination_result(raw, expected):
    assert parse_termination_result(raw) is expected


def test_parse_selection_result_trims_and_validates():
    assert parse_selection_result("  ArtDirector\n", ["CopyWriter", "ArtDirector"]) == "ArtDirector"

    for raw in ("", "   ", "Narrator", "artdirector"):
        with pytest.raises(StrategyParseError):
            parse_selection_result(raw, ["CopyWriter", "ArtDirector"])


def test_render_requires_every_placeholder(scripted_client):
    function = StrategyFunction("t", "{{$history}} / {{$agents}}", scripted_client(["x"]))
    assert function.render(history="h", agents="a") == "h / a"
    with pytest.raises(KeyError):
        function.render(history="h")


def test_format_history_name_only_drops_content():
    messages = [Message.user("brief"), Message.agent("CopyWriter", "secret copy")]

    full = json.loads(format_history(messages))
    names = json.loads(format_history(messages, name_only=True))

    assert full[1] == {"role": "assistant", "name": "CopyWriter", "content": "secret copy"}
    assert names == [{"role": "user", "name": ""}, {"role": "assistant", "name": "CopyWriter"}]


def test_first_turn_returns_initial_agent_without_remote_call(scripted_client):
    client = scripted_client(["ArtDirector"])
    selection = _selection(client)

    agent = asyncio.run(selection.select_next(_state(0, None)))

    assert agent is WRITER
    assert client.calls == []


def test_selection_uses_function_result_over_reduced_name_only_history(scripted_client):
    client = scripted_client(["  ArtDirector  "])
    selection = _selection(client, evaluate_name_only=True)
    state = _state(1, "CopyWriter", ("CopyWriter", "Fold the world flat."))

    agent = asyncio.run(selection.select_next(state))

    assert agent is REVIEWER
    prompt = client.calls[0]["history"][-1].content
    assert "- CopyWriter\n- ArtDirector" in prompt
    assert "Fold the world flat." not in prompt
    assert "concept: egg carton maps" not in prompt


@pytest.mark.parametrize("raw", ["Narrator", "", "   "])
def test_selection_falls_back_to_round_robin(scripted_client, raw, caplog):
    client = scripted_client([raw])
    selection = _selection(client)
    state = _state(1, "CopyWriter", ("CopyWriter", "proposal"))

    with caplog.at_level("WARNING"):
        agent = asyncio.run(selection.select_next(state))

    assert agent is REVIEWER
    assert any("Selection fallback" in record.getMessage() for record in caplog.records)


def test_round_robin_wraps_and_starts_at_first_agent(scripted_client):
    selection = _selection(scripted_client([]))
    assert selection.round_robin_after("ArtDirector") is WRITER
    assert selection.round_robin_after(None) is WRITER


def test_selection_propagates_remote_failures(scripted_client):
    client = scripted_client([RemoteCallError.unexpected(RuntimeError("down"), "converse")])
    selection = _selection(client)

    with pytest.raises(RemoteCallError):
        asyncio.run(selection.select_next(_state(1, "CopyWriter", ("CopyWriter", "x"))))


def test_selection_rejects_bad_configuration(scripted_client):
    function = StrategyFunction("s", "{{$history}}", scripted_client([]))
    with pytest.raises(ValueError):
        SelectionStrategy(function, eligible_agents=[])
    with pytest.raises(ValueError):
        SelectionStrategy(function, eligible_agents=[WRITER, _Agent("CopyWriter")])
    with pytest.raises(ValueError):
        SelectionStrategy(function, eligible_agents=[WRITER], initial_agent=REVIEWER)


def test_termination_short_circuits_for_unauthorized_speaker(scripted_client):
    client = scripted_client(["yes"])
    termination = _termination(client)

    decision = asyncio.run(termination.should_terminate(_state(1, "CopyWriter", ("CopyWriter", "approved"))))

    assert not decision
    assert client.calls == []


def test_termination_is_false_until_cap_then_max_iterations(scripted_client):
    client = scripted_client(respond=lambda prompt, history, agent_name: "no")
    termination = _termination(client, maximum_iterations=4)

    decisions = []
    for turn in range(1, 5):
        speaker = "CopyWriter" if turn % 2 else "ArtDirector"
        decisions.append(asyncio.run(termination.should_terminate(
            _state(turn, speaker, (speaker, "needs work"))
        )))

    assert [bool(d) for d in decisions] == [False, False, False, True]
    assert decisions[-1].reason == CompletionReason.MAX_ITERATIONS_REACHED
    # Only the reviewer's turn below the cap cost a call
    assert len(client.calls) == 1


def test_termination_approves_on_yes(scripted_client):
    client = scripted_client(["Yes"])
    termination = _termination(client)

    decision = asyncio.run(termination.should_terminate(
        _state(2, "ArtDirector", ("CopyWriter", "draft"), ("ArtDirector", "This is approved."))
    ))

    assert decision
    assert decision.reason == CompletionReason.APPROVED
    prompt = client.calls[0]["history"][-1].content
    assert "This is approved." in prompt
    assert "draft" not in prompt


def test_termination_without_authorized_list_evaluates_everyone(scripted_client):
    client = scripted_client(["no"])
    termination = TerminationStrategy(
        function=StrategyFunction("termination", "{{$history}}", client),
        maximum_iterations=3,
    )

    decision = asyncio.run(termination.should_terminate(_state(1, "CopyWriter", ("CopyWriter", "x"))))

    assert not decision
    assert len(client.calls) == 1


def test_termination_rejects_zero_iterations(scripted_client):
    with pytest.raises(ValueError):
        _termination(scripted_client([]), maximum_iterations=0)
