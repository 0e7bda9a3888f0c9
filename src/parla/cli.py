"""Terminal chat front-end.

Examples:
- python -m parla
- python -m parla --load chat-alice-2024-06-10.json
- python -m parla --mock --verbose

Inside the chat, ``/save [FILE]``, ``/load FILE``, ``/clear`` and ``/quit``
are available; anything else is sent as a message.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING, TextIO

from parla import create_chat
from parla.config import DEFAULT_MODEL, Config
from parla.errors import ConfigurationError, TranscriptError
from parla.persona import PERSONA_NAME

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parla.chat import Chat
    from parla.turns import Turn

log = logging.getLogger(__name__)

PROMPT = "> "


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parla",
        description=f"Chat with {PERSONA_NAME} from the terminal.",
    )
    parser.add_argument(
        "--model",
        default=DEFAULT_MODEL,
        help=f"Gemini model to talk to (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the offline echo backend instead of Gemini",
    )
    parser.add_argument(
        "--load",
        metavar="FILE",
        help="Resume a conversation from an exported transcript",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output (including retries) to stderr",
    )
    return parser


def _render(turn: Turn, out: TextIO) -> None:
    speaker = "Tu" if turn.role == "user" else PERSONA_NAME
    print(f"{speaker}: {turn.text}", file=out)


def _handle_command(line: str, chat: Chat, out: TextIO) -> bool:
    """Run a slash command. Returns False when the session should end."""
    name, _, arg = line.partition(" ")
    arg = arg.strip()
    if name == "/quit":
        return False
    if name == "/clear":
        chat.clear()
        for turn in chat.turns:
            _render(turn, out)
    elif name == "/save":
        try:
            path = chat.export(arg or None)
        except TranscriptError as e:
            print(f"Could not save: {e}", file=out)
            return True
        print(f"Saved {len(chat.turns)} message(s) to {path}", file=out)
    elif name == "/load":
        if not arg:
            print("Usage: /load FILE", file=out)
            return True
        try:
            chat.load(arg)
        except TranscriptError as e:
            print(f"Could not load {arg}: {e}", file=out)
            return True
        for turn in chat.turns:
            _render(turn, out)
    else:
        print(f"Unknown command {name}", file=out)
    return True


async def repl(chat: Chat, *, stdin: TextIO, stdout: TextIO) -> None:
    """Read lines until EOF or /quit, sending each one to the chat."""
    for turn in chat.turns:
        _render(turn, stdout)
    while True:
        print(PROMPT, end="", file=stdout, flush=True)
        # Keep the event loop free while waiting on the terminal.
        line = await asyncio.to_thread(stdin.readline)
        if not line:
            break
        line = line.strip()
        if line.startswith("/"):
            if not _handle_command(line, chat, stdout):
                break
            continue
        turn = await chat.send(line)
        if turn is not None:
            _render(turn, stdout)


def main(
    argv: Sequence[str] | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Entry point for the ``parla`` console script."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = Config(model=args.model, use_mock=args.mock)
        chat = create_chat(config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.hint:
            print(f"Hint: {e.hint}", file=sys.stderr)
        return 2

    if args.load:
        try:
            chat.load(args.load)
        except TranscriptError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    asyncio.run(repl(chat, stdin=stdin or sys.stdin, stdout=stdout or sys.stdout))
    return 0
