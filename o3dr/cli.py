import asyncio
import logging
import os
import sys
from typing import List, Optional, Sequence, TextIO

from o3dr import __version__
from o3dr.config import load_config
from o3dr.mcp_server import serve
from o3dr.models import Command, Configuration, SearchFailed, SearchSucceeded
from o3dr.query_source import resolve_command
from o3dr.run_manager import RunManager
from o3dr.transcript import Transcript, open_transcript

logger = logging.getLogger(__name__)

HELP_TEXT = """
dr - Deep Research Tool

Usage:
  dr [query]                 Search with a query
  dr -p "query"              Search with a query (alternative syntax)
  echo "query" | dr          Search with piped input
  dr mcp                     Start MCP server
  dr -h, --help              Show this help message
  dr -v, --version           Show version

Examples:
  dr "What is Node.js?"
  dr -p "Latest AI trends"
  cat error.log | dr "How do I fix this error?"
  dr mcp

API Key Configuration:
  Set OPENAI_API_KEY environment variable or create ~/.openai.env file with:
  OPENAI_API_KEY=your-api-key-here

Environment:
  OPENAI_MAX_RETRIES         Client retries for transient failures (default: 3)
  OPENAI_API_TIMEOUT         Timeout in milliseconds (default: 1800000)
  SEARCH_CONTEXT_SIZE        low | medium | high (default: medium)
  REASONING_EFFORT           low | medium | high (default: medium)
  OPENAI_MODEL               Model name (default: o3)
  DR_CACHE_DIR               Transcript directory (default: ~/.cache/o3-dr)
"""


class UnknownActionError(RuntimeError):
    pass


def configure_logging() -> None:
    level_name = str(os.getenv("DR_LOG_LEVEL", "WARNING")).strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _open_transcript_or_warn(config: Configuration) -> Optional[Transcript]:
    try:
        return open_transcript(config.cache_dir)
    except OSError as exc:
        logger.warning("Could not create transcript in %s: %s", config.cache_dir, exc)
        return None


async def run_search(
    query: str,
    config: Configuration,
    run_manager: Optional[RunManager] = None,
) -> int:
    if not query.strip():
        print("Error: no query given. Run `dr --help` for usage.", file=sys.stderr)
        return 1
    manager = run_manager if run_manager is not None else RunManager(config)

    print(f"[search] {query}", file=sys.stderr, flush=True)
    transcript = _open_transcript_or_warn(config)
    if transcript is not None:
        print(f"[transcript] {transcript.path}", file=sys.stderr, flush=True)

    outcome = await manager.run(query, transcript=transcript)
    if isinstance(outcome, SearchSucceeded):
        print(f"\n[result] completed in {outcome.elapsed_sec:.1f}s", file=sys.stderr)
        print(outcome.text)
        return 0
    print(f"Error: {outcome.message}", file=sys.stderr)
    return 1 if isinstance(outcome, SearchFailed) else 0


def dispatch(command: Command, config: Configuration) -> int:
    if command.action == "help":
        print(HELP_TEXT)
        return 0
    if command.action == "version":
        print(f"dr {__version__}")
        return 0
    if command.action == "mcp":
        asyncio.run(serve(config))
        return 0
    if command.action == "search":
        return asyncio.run(run_search(command.query, config))
    raise UnknownActionError(f"Unknown action: {command.action}")


def main(argv: Optional[Sequence[str]] = None, stdin: Optional[TextIO] = None) -> int:
    configure_logging()
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    try:
        command = resolve_command(args, stdin)
        if command.action in {"help", "version"}:
            return dispatch(command, Configuration())
        return dispatch(command, load_config())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130
    except Exception as exc:
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1


def entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
