"""Semantic Kernel plugins available to the agents."""

from .menu import MenuItem, MenuPlugin

__all__ = [
    'MenuItem',
    'MenuPlugin'
]
