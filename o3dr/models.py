from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


EffortLevel = Literal["low", "medium", "high"]
CommandAction = Literal["help", "version", "mcp", "search"]


class Configuration(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = None
    max_retries: int = Field(default=3, ge=0)
    timeout_ms: int = Field(default=1_800_000, ge=1)
    search_context_size: EffortLevel = "medium"
    reasoning_effort: EffortLevel = "medium"
    model: str = Field(default="o3", min_length=1)
    cache_dir: Path = Field(default_factory=lambda: Path.home() / ".cache" / "o3-dr")

    @property
    def timeout_sec(self) -> float:
        return self.timeout_ms / 1000.0


class Command(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: CommandAction
    query: str = ""


@dataclass(frozen=True)
class SearchSucceeded:
    text: str
    elapsed_sec: float
    checks: int = 0

    ok = True


@dataclass(frozen=True)
class SearchFailed:
    message: str
    elapsed_sec: float
    checks: int = 0

    ok = False


@dataclass(frozen=True)
class SearchTimedOut:
    elapsed_sec: float
    timeout_sec: float
    checks: int = 0

    ok = False

    @property
    def message(self) -> str:
        return f"Request timed out after {self.elapsed_sec:.1f}s (limit {self.timeout_sec:.1f}s)"


RequestOutcome = Union[SearchSucceeded, SearchFailed, SearchTimedOut]
