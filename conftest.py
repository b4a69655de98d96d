"""Shared fakes for the agent chat tests."""

import copy

import pytest

from agentdemo.agents.base import BaseChatAgent
from agentdemo.models.message import Message


class ScriptedClient:
    """
    Stand-in for BedrockClient.

    Replies come from `respond(prompt_text, history, agent_name)` when given, otherwise
    from the `responses` list in order. An Exception in the list is raised.
    """

    def __init__(self, responses=None, respond=None):
        self.calls = []
        self._responses = list(responses or [])
        self._respond = respond

    async def complete(self, history, instructions="", kernel=None, agent_name=None):
        history = tuple(history)
        self.calls.append({
            "history": history,
            "instructions": instructions,
            "kernel": kernel,
            "agent_name": agent_name,
        })
        prompt = history[-1].content if history else ""
        reply = self._respond(prompt, history, agent_name) if self._respond else self._responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return Message.agent(agent_name or "model", reply)


class ScriptedAgent(BaseChatAgent):
    """Agent replying from a fixed list, recording the history it was given."""

    def __init__(self, name, replies):
        super().__init__(name=name, instructions=f"You are {name}.")
        self._replies = list(replies)
        self.seen = []

    async def invoke(self, history):
        self.seen.append(tuple(history))
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, Exception):
            raise reply
        return Message.agent(self.name, reply)


class StubRuntime:
    """Stand-in for the boto3 bedrock-runtime client."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def converse(self, **params):
        self.requests.append(copy.deepcopy(params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def converse_text(text, stop_reason="end_turn"):
    return {
        "output": {"message": {"role": "assistant", "content": [{"text": text}]}},
        "stopReason": stop_reason,
        "usage": {"inputTokens": 10, "outputTokens": 5},
    }


@pytest.fixture
def scripted_client():
    return ScriptedClient


@pytest.fixture
def scripted_agent():
    return ScriptedAgent


@pytest.fixture
def stub_runtime():
    return StubRuntime


@pytest.fixture
def text_response():
    return converse_text
