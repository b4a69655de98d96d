"""Tests for the menu plugin and the host agent wiring."""

import asyncio

from agentdemo.agents import MenuHostAgent
from agentdemo.models.message import AuthorRole, Message
from agentdemo.plugins.menu import MENU_ITEMS, MenuItem, MenuPlugin


def test_menu_lists_every_item():
    menu = MenuPlugin().get_menu()
    assert len(menu) == 6
    assert {item.category for item in menu} == {"Soup", "Salad", "Drink"}


def test_specials_are_clam_chowder_and_chai_tea():
    specials = MenuPlugin().get_specials()
    assert [item.name for item in specials] == ["Clam Chowder", "Chai Tea"]
    assert all(item.is_special for item in specials)


def test_item_price_lookup_ignores_case():
    plugin = MenuPlugin()
    assert plugin.get_item_price("clam chowder") == 4.95
    assert plugin.get_item_price("  COBB SALAD ") == 9.99
    assert plugin.get_item_price("Lobster Bisque") is None


def test_custom_items():
    plugin = MenuPlugin(items=[MenuItem("Dessert", "Pie", 3.5, is_special=True)])
    assert plugin.get_specials() == [MenuItem("Dessert", "Pie", 3.5, True)]
    assert len(MENU_ITEMS) == 6


def test_host_agent_passes_kernel_and_instructions(scripted_client):
    client = scripted_client(["The special soup is Clam Chowder for $4.95."])
    agent = MenuHostAgent(client)

    reply = asyncio.run(agent.invoke([Message.user("What is the special soup?")]))

    assert agent.get_plugin_names() == ["menu"]
    assert reply.role == AuthorRole.AGENT
    assert reply.name == "HostAgent"
    assert "Clam Chowder" in reply.content
    call = client.calls[0]
    assert call["instructions"] == "Answer questions about the menu."
    assert call["agent_name"] == "HostAgent"
    assert call["kernel"] is agent.kernel
