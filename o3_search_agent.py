from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

DEFAULT_MODEL = "o3"
NO_RESPONSE_TEXT = "No response text available."
SEARCH_TOOL_TYPE = "web_search_preview"


def build_search_request(
    query: str,
    model: str = DEFAULT_MODEL,
    search_context_size: str = "medium",
    reasoning_effort: str = "medium",
) -> Dict[str, Any]:
    tools: List[Dict[str, Any]] = [
        {
            "type": SEARCH_TOOL_TYPE,
            "search_context_size": search_context_size,
        }
    ]
    return {
        "model": model,
        "input": query,
        "tools": tools,
        "tool_choice": "auto",
        "parallel_tool_calls": True,
        "reasoning": {"effort": reasoning_effort},
    }


class O3Search:
    """One web-search augmented reasoning call against the Responses API.

    Transient failures (rate limits, 5xx, connection errors) are retried by the
    OpenAI client itself, up to ``max_retries`` times. The client is created on
    first use so that a missing API key surfaces as an error of the call.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_retries: int = 3,
        timeout_sec: float = 1800.0,
        search_context_size: str = "medium",
        reasoning_effort: str = "medium",
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.max_retries = max_retries
        self.timeout_sec = timeout_sec
        self.search_context_size = search_context_size
        self.reasoning_effort = reasoning_effort
        self._client: AsyncOpenAI | None = None

    @classmethod
    def from_config(cls, config: Any) -> "O3Search":
        return cls(
            api_key=config.api_key,
            model=config.model,
            max_retries=config.max_retries,
            timeout_sec=config.timeout_sec,
            search_context_size=config.search_context_size,
            reasoning_effort=config.reasoning_effort,
        )

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            # AsyncOpenAI raises OpenAIError here when neither api_key nor
            # OPENAI_API_KEY is available.
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                max_retries=self.max_retries,
                timeout=self.timeout_sec,
            )
        return self._client

    async def ask(self, query: str) -> str:
        rsp = await self.client.responses.create(
            **build_search_request(
                query,
                model=self.model,
                search_context_size=self.search_context_size,
                reasoning_effort=self.reasoning_effort,
            )
        )
        return getattr(rsp, "output_text", "") or NO_RESPONSE_TEXT
