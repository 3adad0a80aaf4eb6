import sys
from typing import List, Optional, Sequence, TextIO

from o3dr.models import Command

HELP_FLAGS = {"-h", "--help"}
VERSION_FLAGS = {"-v", "--version"}
PROMPT_FLAG = "-p"
SERVER_KEYWORD = "mcp"


def parse_arguments(args: Sequence[str]) -> Command:
    if not args:
        return Command(action="help")
    first = args[0]
    if first in HELP_FLAGS:
        return Command(action="help")
    if first in VERSION_FLAGS:
        return Command(action="version")
    if first == SERVER_KEYWORD:
        return Command(action="mcp")
    if first == PROMPT_FLAG:
        return Command(action="search", query=" ".join(args[1:]).strip())
    return Command(action="search", query=" ".join(args).strip())


def read_piped_stdin(stream: Optional[TextIO] = None) -> Optional[str]:
    """Read all of ``stream`` unless it is an interactive terminal."""
    src = sys.stdin if stream is None else stream
    if src is None:
        return None
    try:
        if src.isatty():
            return None
    except (AttributeError, ValueError):
        return None
    buffer = getattr(src, "buffer", None)
    if buffer is not None:
        # Undecodable bytes become U+FFFD instead of aborting the search.
        data = buffer.read().decode("utf-8", errors="replace")
    else:
        data = src.read()
    text = (data or "").strip()
    return text or None


def resolve_command(args: Sequence[str], stdin: Optional[TextIO] = None) -> Command:
    """Merge command-line tokens and piped standard input into one command.

    Standard input is only read when the command could use it: a search, or a
    bare ``dr`` that becomes a search when something was piped in. ``mcp``,
    help and version never touch it.
    """
    tokens: List[str] = list(args)
    command = parse_arguments(tokens)
    if command.action == "help" and tokens:
        return command
    if command.action not in {"help", "search"}:
        return command

    piped = read_piped_stdin(stdin)
    if piped is None:
        return command
    if command.action == "help":
        return Command(action="search", query=piped)
    parts = [p for p in (command.query, piped) if p]
    return Command(action="search", query=" ".join(parts))
