"""Agent chat demos: a menu host agent and a turn-taking copy review chat."""

__version__ = "0.1.0"
