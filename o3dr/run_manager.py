import asyncio
import logging
import sys
import time
from typing import Optional, Protocol

from o3_search_agent import NO_RESPONSE_TEXT, O3Search
from o3dr.models import (
    Configuration,
    RequestOutcome,
    SearchFailed,
    SearchSucceeded,
    SearchTimedOut,
)
from o3dr.progress import format_progress
from o3dr.transcript import Transcript

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error occurred"
INTERRUPTED = "Interrupted before a response arrived"


class SearchClient(Protocol):
    async def ask(self, query: str) -> str: ...


class RunManager:
    """Runs one query to exactly one outcome.

    The outbound call is raced against ``config.timeout_sec`` while a ticker
    reports progress every ``progress_interval_sec``. The manager knows nothing
    about which surface called it; the CLI passes a transcript, the server
    does not.
    """

    _DEFAULT_PROGRESS_INTERVAL_SEC = 10.0

    def __init__(
        self,
        config: Configuration,
        search: Optional[SearchClient] = None,
        progress_interval_sec: float = _DEFAULT_PROGRESS_INTERVAL_SEC,
        verbose: bool = True,
    ) -> None:
        self.config = config
        self.search = search if search is not None else O3Search.from_config(config)
        self.progress_interval_sec = float(progress_interval_sec)
        self.verbose = verbose

    async def run(self, query: str, transcript: Optional[Transcript] = None) -> RequestOutcome:
        started = time.monotonic()
        checks = 0

        def elapsed() -> float:
            return time.monotonic() - started

        def tick() -> None:
            nonlocal checks
            checks += 1
            secs = elapsed()
            self._log(format_progress(secs, checks))
            if transcript is not None:
                transcript.write_progress_tick(secs, checks)

        async def ticker() -> None:
            while True:
                await asyncio.sleep(self.progress_interval_sec)
                tick()

        if transcript is not None:
            transcript.write_header(query, model=self.config.model)

        call = asyncio.ensure_future(self.search.ask(query))
        progress = asyncio.ensure_future(ticker())
        try:
            try:
                done, _ = await asyncio.wait({call}, timeout=self.config.timeout_sec)
            except asyncio.CancelledError:
                progress.cancel()
                if transcript is not None:
                    transcript.write_error(INTERRUPTED, elapsed(), checks)
                raise
            progress.cancel()
            outcome = self._settle(call if done else None, elapsed(), checks)
            self._record(outcome, transcript)
            return outcome
        finally:
            for task in (progress, call):
                if not task.done():
                    task.cancel()
            if transcript is not None:
                transcript.close()

    def _settle(
        self, call: Optional["asyncio.Future[str]"], elapsed_sec: float, checks: int
    ) -> RequestOutcome:
        if call is None:
            return SearchTimedOut(
                elapsed_sec=elapsed_sec,
                timeout_sec=self.config.timeout_sec,
                checks=checks,
            )
        exc = call.exception()
        if exc is not None:
            logger.debug("Search call failed", exc_info=exc)
            message = str(exc).strip() or UNKNOWN_ERROR
            return SearchFailed(message=message, elapsed_sec=elapsed_sec, checks=checks)
        return SearchSucceeded(
            text=call.result() or NO_RESPONSE_TEXT,
            elapsed_sec=elapsed_sec,
            checks=checks,
        )

    def _record(self, outcome: RequestOutcome, transcript: Optional[Transcript]) -> None:
        if isinstance(outcome, SearchSucceeded):
            if transcript is not None:
                transcript.write_result(outcome.text, outcome.elapsed_sec)
            return
        logger.info("Search ended without a result: %s", outcome.message)
        if transcript is not None:
            transcript.write_error(outcome.message, outcome.elapsed_sec, outcome.checks)

    def _log(self, message: str) -> None:
        if self.verbose:
            print(message, file=sys.stderr, flush=True)
