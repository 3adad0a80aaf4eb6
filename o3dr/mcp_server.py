"""
Model Context Protocol server exposing the search as a single tool.

Register it with an MCP host, e.g. in ``claude_desktop_config.json``:

    {
      "mcpServers": {
        "o3-dr": {"command": "dr", "args": ["mcp"]}
      }
    }

Each tool call runs one search lifecycle. Failures come back as text results;
nothing raised by a search crosses the transport.
"""

import logging
import sys
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from o3dr import __version__
from o3dr.models import Configuration
from o3dr.progress import format_outcome
from o3dr.run_manager import RunManager

logger = logging.getLogger(__name__)

SERVER_NAME = "o3-dr"
TOOL_NAME = "o3-search"
TOOL_DESCRIPTION = (
    "An AI agent with advanced web search capabilities. Useful for finding the "
    "latest information, troubleshooting errors, and discussing ideas or design "
    "challenges. Supports natural language queries."
)


def get_tools() -> List[Tool]:
    return [
        Tool(
            name=TOOL_NAME,
            description=TOOL_DESCRIPTION,
            inputSchema={
                "type": "object",
                "properties": {
                    "input": {
                        "type": "string",
                        "description": (
                            "Ask questions, search for information, or consult "
                            "about complex problems in English."
                        ),
                    },
                },
                "required": ["input"],
            },
        )
    ]


def _text(text: str) -> List[TextContent]:
    return [TextContent(type="text", text=text)]


async def handle_tool_call(
    name: str, arguments: Optional[Dict[str, Any]], run_manager: RunManager
) -> List[TextContent]:
    if name != TOOL_NAME:
        return _text(f"Error: Unknown tool '{name}'")
    query = (arguments or {}).get("input")
    if not isinstance(query, str) or not query.strip():
        return _text("Error: Argument 'input' is required.")
    try:
        outcome = await run_manager.run(query.strip())
    except Exception as exc:
        logger.exception("Search lifecycle failed unexpectedly")
        return _text(f"Error: {str(exc) or 'Unknown error occurred'}")
    if not outcome.ok:
        logger.error("%s failed: %s", TOOL_NAME, outcome.message)
    return _text(format_outcome(outcome))


def build_server(config: Configuration, run_manager: Optional[RunManager] = None) -> Server:
    manager = run_manager if run_manager is not None else RunManager(config)
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        return get_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        return await handle_tool_call(name, arguments, manager)

    return server


async def serve(config: Configuration, run_manager: Optional[RunManager] = None) -> None:
    server = build_server(config, run_manager)
    async with stdio_server() as (read_stream, write_stream):
        print("MCP Server running on stdio", file=sys.stderr, flush=True)
        await server.run(read_stream, write_stream, server.create_initialization_options())
