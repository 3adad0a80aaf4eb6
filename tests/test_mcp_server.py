import asyncio

from mcp import types

from o3dr.mcp_server import TOOL_NAME, build_server, get_tools, handle_tool_call
from o3dr.models import Configuration, SearchFailed, SearchSucceeded, SearchTimedOut


class FakeManager:
    def __init__(self, outcome=None, error=None):
        self.outcome = outcome
        self.error = error
        self.queries = []

    async def run(self, query, transcript=None):
        self.queries.append((query, transcript))
        if self.error is not None:
            raise self.error
        return self.outcome


def test_exposes_single_search_tool():
    tools = get_tools()

    assert [t.name for t in tools] == ["o3-search"]
    assert tools[0].inputSchema["required"] == ["input"]
    assert tools[0].inputSchema["properties"]["input"]["type"] == "string"


def test_success_returns_text_without_transcript():
    manager = FakeManager(outcome=SearchSucceeded(text="result body", elapsed_sec=1.0))

    content = asyncio.run(handle_tool_call(TOOL_NAME, {"input": " what's new? "}, manager))

    assert len(content) == 1
    assert content[0].type == "text"
    assert content[0].text == "result body"
    assert manager.queries == [("what's new?", None)]


def test_failures_are_text_results():
    failed = FakeManager(outcome=SearchFailed(message="quota exceeded", elapsed_sec=0.5))
    timed_out = FakeManager(outcome=SearchTimedOut(elapsed_sec=60.0, timeout_sec=60.0))

    failed_text = asyncio.run(handle_tool_call(TOOL_NAME, {"input": "q"}, failed))[0].text
    timeout_text = asyncio.run(handle_tool_call(TOOL_NAME, {"input": "q"}, timed_out))[0].text

    assert failed_text == "Error: quota exceeded"
    assert timeout_text.startswith("Error: Request timed out after 60.0s")


def test_unexpected_exception_never_escapes():
    manager = FakeManager(error=RuntimeError("boom"))

    content = asyncio.run(handle_tool_call(TOOL_NAME, {"input": "q"}, manager))

    assert content[0].text == "Error: boom"


def test_bad_calls_are_reported_as_text():
    manager = FakeManager()

    unknown = asyncio.run(handle_tool_call("other-tool", {"input": "q"}, manager))
    missing = asyncio.run(handle_tool_call(TOOL_NAME, {}, manager))
    blank = asyncio.run(handle_tool_call(TOOL_NAME, {"input": "   "}, manager))

    assert "Unknown tool" in unknown[0].text
    assert "required" in missing[0].text
    assert "required" in blank[0].text
    assert manager.queries == []


def test_build_server_names_the_server():
    server = build_server(Configuration(api_key="k"), run_manager=FakeManager())

    assert server.name == "o3-dr"


def test_registered_handlers_list_and_call_the_tool():
    manager = FakeManager(outcome=SearchSucceeded(text="via server", elapsed_sec=0.2))
    server = build_server(Configuration(api_key="k"), run_manager=manager)

    async def scenario():
        listed = await server.request_handlers[types.ListToolsRequest](
            types.ListToolsRequest(method="tools/list")
        )
        called = await server.request_handlers[types.CallToolRequest](
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(name=TOOL_NAME, arguments={"input": "q"}),
            )
        )
        return listed.root, called.root

    listed, called = asyncio.run(scenario())

    assert [t.name for t in listed.tools] == ["o3-search"]
    schema = listed.tools[0].inputSchema
    assert schema["required"] == ["input"]
    assert schema["properties"]["input"]["type"] == "string"
    assert not called.isError
    assert len(called.content) == 1
    assert called.content[0].type == "text"
    assert called.content[0].text == "via server"
    assert manager.queries == [("q", None)]


def test_short_timeout_limit_keeps_a_decimal():
    outcome = SearchTimedOut(elapsed_sec=0.2, timeout_sec=0.2)

    assert outcome.message == "Request timed out after 0.2s (limit 0.2s)"
