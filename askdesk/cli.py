"""
Command-line entry point.

Usage:
    askdesk --user u1 "What are your delivery hours?"
    askdesk --user u1            # interactive, history kept across questions
"""

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from .common.errors import AskdeskError
from .service import create_orchestrator


async def _ask(orchestrator, question: str, user_id: str) -> int:
    try:
        result = await orchestrator.answer(question, user_id)
    except AskdeskError as e:
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 2 if e.kind == "invalid_input" else 1
    print(result.answer)
    return 0


async def _interactive(orchestrator, user_id: str) -> int:
    while True:
        try:
            question = await asyncio.to_thread(input, "> ")
        except EOFError:
            return 0
        if question.strip() in ("exit", "quit"):
            return 0
        if question.strip():
            await _ask(orchestrator, question, user_id)


def main() -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Ask the FAQ assistant a question.")
    parser.add_argument("question", nargs="?", help="Question to ask (omit for interactive mode)")
    parser.add_argument("--user", default="cli", help="User id for conversation history")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    orchestrator = create_orchestrator()
    if args.question:
        sys.exit(asyncio.run(_ask(orchestrator, args.question, args.user)))
    sys.exit(asyncio.run(_interactive(orchestrator, args.user)))


if __name__ == "__main__":
    main()
