"""Utility modules for configuration, logging, console output and AWS integration."""

from .console import format_chat_message, print_chat_message

__all__ = [
    'format_chat_message',
    'print_chat_message'
]
