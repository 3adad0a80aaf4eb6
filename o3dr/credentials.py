import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

API_KEY_VAR = "OPENAI_API_KEY"
DEFAULT_ENV_FILE = Path.home() / ".openai.env"
_QUOTES = "\"'"


@dataclass(frozen=True)
class ApiKeyLookup:
    value: Optional[str]
    source: Optional[str]
    warning: Optional[str] = None


def _parse_env_line(line: str) -> tuple[str, str] | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    if stripped.startswith("export "):
        stripped = stripped[len("export ") :].lstrip()
    key, _, value = stripped.partition("=")
    value = value.strip()
    if value[:1] in _QUOTES:
        value = value[1:]
    if value[-1:] in _QUOTES:
        value = value[:-1]
    return key.strip(), value


def lookup_api_key(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> ApiKeyLookup:
    """Find the API key without raising.

    The environment variable wins. Otherwise the first ``OPENAI_API_KEY=`` line
    of ``~/.openai.env`` is used. Read failures come back as ``warning``.
    """
    env = os.environ if environ is None else environ
    from_env = str(env.get(API_KEY_VAR, "") or "").strip()
    if from_env:
        return ApiKeyLookup(value=from_env, source="env")

    path = DEFAULT_ENV_FILE if env_file is None else Path(env_file)
    try:
        if not path.exists():
            return ApiKeyLookup(value=None, source=None)
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return ApiKeyLookup(
            value=None,
            source=None,
            warning=f"Could not read {path}: {exc}",
        )

    for line in content.splitlines():
        parsed = _parse_env_line(line)
        if parsed and parsed[0] == API_KEY_VAR:
            return ApiKeyLookup(value=parsed[1] or None, source="file")
    return ApiKeyLookup(value=None, source=None)


def load_api_key(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> Optional[str]:
    lookup = lookup_api_key(environ=environ, env_file=env_file)
    if lookup.warning:
        logger.warning(lookup.warning)
    if not lookup.value:
        logger.warning(
            "%s is not set and no key was found in %s; requests will fail.",
            API_KEY_VAR,
            env_file or DEFAULT_ENV_FILE,
        )
    return lookup.value
