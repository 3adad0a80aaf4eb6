import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

_MAX_NAME_ATTEMPTS = 1000


class TranscriptClosedError(RuntimeError):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Transcript:
    """Append-only markdown record of a single search.

    Sections are written in call order and flushed before each method returns.
    ``close`` writes the footer; after that the file is never touched again.
    """

    def __init__(self, path: Path, handle: TextIO) -> None:
        self.path = path
        self._handle: Optional[TextIO] = handle
        self.closed = False

    def write_header(self, query: str, model: str = "") -> None:
        lines = [
            "# Deep Research Transcript",
            "",
            f"- Started: {_now().isoformat()}",
        ]
        if model:
            lines.append(f"- Model: {model}")
        lines += ["", "## Query", "", query.strip(), "", "## Progress", ""]
        self._append("\n".join(lines) + "\n")

    def write_progress_tick(self, elapsed_sec: float, check_index: int) -> None:
        self._append(f"- [{elapsed_sec:.0f}s] check #{check_index}: waiting for response\n")

    def write_result(self, text: str, elapsed_sec: float) -> None:
        self._append(
            "\n## Result\n\n"
            f"- Elapsed: {elapsed_sec:.1f}s\n\n"
            f"{text.rstrip()}\n"
        )

    def write_error(self, message: str, elapsed_sec: float, checks_completed: int) -> None:
        self._append(
            "\n## Error\n\n"
            f"- Elapsed: {elapsed_sec:.1f}s\n"
            f"- Progress checks completed: {checks_completed}\n\n"
            f"{message.rstrip()}\n"
        )

    def close(self) -> None:
        if self.closed:
            return
        try:
            self._append(f"\n---\n\n_Finished: {_now().isoformat()}_\n")
        finally:
            self.closed = True
            handle, self._handle = self._handle, None
            if handle is not None:
                try:
                    handle.close()
                except OSError as exc:
                    logger.warning("Could not close transcript %s: %s", self.path, exc)

    def _append(self, text: str) -> None:
        if self.closed or self._handle is None:
            raise TranscriptClosedError(f"Transcript {self.path} is already closed.")
        try:
            self._handle.write(text)
            self._handle.flush()
        except OSError as exc:
            logger.warning("Could not write to transcript %s: %s", self.path, exc)


def open_transcript(cache_dir: Path, now: Optional[datetime] = None) -> Transcript:
    directory = Path(cache_dir).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    stamp = (now or _now()).strftime("%Y%m%dT%H%M%SZ")
    for attempt in range(_MAX_NAME_ATTEMPTS):
        name = f"{stamp}.md" if attempt == 0 else f"{stamp}-{attempt}.md"
        path = directory / name
        try:
            handle = path.open("x", encoding="utf-8")
        except FileExistsError:
            continue
        return Transcript(path, handle)
    raise FileExistsError(f"No free transcript name for {stamp} in {directory}")
