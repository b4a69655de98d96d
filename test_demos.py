"""End-to-end runs of both demos against a scripted model."""

import asyncio

import pytest

from agentdemo import cli, demos
from agentdemo.orchestration.state import ChatState, CompletionReason
from agentdemo.utils.config import GroupChatConfig


def _copy_review_model(approve_on_turn=2):
    turns = {"ArtDirector": 0}

    def respond(prompt, history, agent_name):
        if agent_name == "CopyWriter":
            return "Fold the world flat: an atlas you can recycle."
        if agent_name == "ArtDirector":
            turns["ArtDirector"] += 1
            if turns["ArtDirector"] * 2 >= approve_on_turn:
                return "This copy is approved."
            return "Too literal. Try again."
        if prompt.startswith("Determine which participant"):
            return "ArtDirector" if '"name": "CopyWriter"' in prompt else "CopyWriter"
        return "yes" if "copy is approved" in prompt else "no"

    return respond


def test_copy_review_runs_until_approval(scripted_client, capsys):
    client = scripted_client(respond=_copy_review_model(approve_on_turn=4))

    chat = asyncio.run(demos.run_copy_review(client, demos.COPY_CONCEPT))

    assert chat.completion_reason == CompletionReason.APPROVED
    assert [m.name for m in chat.log.messages[1:]] == ["CopyWriter", "ArtDirector"] * 2
    out = capsys.readouterr().out
    assert "# user: concept: maps made out of egg cartons" in out
    assert "# assistant - ArtDirector: This copy is approved." in out
    assert "[IS COMPLETED: True] (approved)" in out


def test_copy_review_respects_iteration_setting(scripted_client, capsys):
    client = scripted_client(respond=_copy_review_model(approve_on_turn=100))
    settings = GroupChatConfig(maximum_iterations=3)

    chat = asyncio.run(demos.run_copy_review(client, "concept: tin can telephones", settings))

    assert chat.state.state == ChatState.COMPLETED
    assert chat.completion_reason == CompletionReason.MAX_ITERATIONS_REACHED
    assert chat.state.turn_count == 3


def test_strategies_see_only_the_latest_message(scripted_client, capsys):
    client = scripted_client(respond=_copy_review_model(approve_on_turn=2))

    asyncio.run(demos.run_copy_review(client))

    strategy_prompts = [c["history"][-1].content for c in client.calls if c["agent_name"] is None]
    selection_prompt = next(p for p in strategy_prompts if p.startswith("Determine which participant"))
    assert "- CopyWriter\n- ArtDirector" in selection_prompt
    assert "Fold the world flat" not in selection_prompt
    assert "egg cartons" not in selection_prompt
    termination_prompt = next(p for p in strategy_prompts if p.startswith("Determine if the copy"))
    assert "This copy is approved." in termination_prompt
    assert "Fold the world flat" not in termination_prompt


def test_menu_demo_prints_question_and_answer(scripted_client, capsys):
    client = scripted_client(["The special soup is Clam Chowder for $4.95."])

    log = asyncio.run(demos.run_menu_demo(client))

    assert [m.sequence_number for m in log] == [1, 2]
    assert log.get_latest_message("HostAgent").content.endswith("$4.95.")
    out = capsys.readouterr().out
    assert f"# user: {demos.MENU_QUESTION}" in out
    assert "# assistant - HostAgent: The special soup" in out


def test_copy_review_cli_exit_codes(scripted_client, monkeypatch, capsys):
    runs = []

    def fake_runtime(config_path):
        runs.append(config_path)
        return demos.Config.from_dict({"aws": {"bedrock": {"model_id": "test"}}}), scripted_client(
            respond=_copy_review_model(approve_on_turn=100)
        )

    monkeypatch.setattr(cli, "load_runtime", fake_runtime)

    assert cli.copy_review_main(["--config", "other.yaml", "--max-iterations", "2", "tin", "cans"]) == 2
    assert runs == ["other.yaml"]
    assert "# user: tin cans" in capsys.readouterr().out


@pytest.mark.parametrize("value", ["0", "-3", "ten"])
def test_copy_review_cli_rejects_bad_iteration_cap(value, monkeypatch, capsys):
    runs = []
    monkeypatch.setattr(cli, "load_runtime", lambda config_path: runs.append(config_path))

    with pytest.raises(SystemExit) as exc_info:
        cli.copy_review_main(["--max-iterations", value])

    assert exc_info.value.code == 2
    assert "--max-iterations" in capsys.readouterr().err
    assert runs == []
