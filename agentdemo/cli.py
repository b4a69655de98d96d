"""Command line entry points for the demos."""

import argparse
import asyncio
import dataclasses
import sys
from typing import List, Optional

from .demos import COPY_CONCEPT, MENU_QUESTION, load_runtime, run_copy_review, run_menu_demo
from .orchestration import CompletionReason
from .utils.errors import AgentChatError


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _parser(description: str, default_prompt: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "prompt",
        nargs="*",
        help=f"User message (default: {default_prompt!r})",
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the YAML configuration file",
    )
    return parser


def menu_main(argv: Optional[List[str]] = None) -> int:
    args = _parser("Ask the menu host agent a question", MENU_QUESTION).parse_args(argv)
    question = " ".join(args.prompt) or MENU_QUESTION

    try:
        _, client = load_runtime(args.config)
        asyncio.run(run_menu_demo(client, question))
    except AgentChatError as e:
        print(f"\n[ERROR] {e}", file=sys.stderr)
        return 1
    return 0


def copy_review_main(argv: Optional[List[str]] = None) -> int:
    parser = _parser("Run the copywriter / art director review chat", COPY_CONCEPT)
    parser.add_argument(
        "--max-iterations",
        type=_positive_int,
        default=None,
        help="Override group_chat.maximum_iterations",
    )
    args = parser.parse_args(argv)
    concept = " ".join(args.prompt) or COPY_CONCEPT

    try:
        config, client = load_runtime(args.config)
        settings = config.group_chat
        if args.max_iterations is not None:
            settings = dataclasses.replace(settings, maximum_iterations=args.max_iterations)
        chat = asyncio.run(run_copy_review(client, concept, settings))
    except AgentChatError as e:
        print(f"\n[ERROR] {e}", file=sys.stderr)
        return 1

    # 0 approved, 2 stopped at the iteration cap
    return 0 if chat.completion_reason == CompletionReason.APPROVED else 2


if __name__ == "__main__":
    sys.exit(copy_review_main())
