import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from o3dr.credentials import load_api_key
from o3dr.models import Configuration

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "max_retries": 3,
    "timeout_ms": 1_800_000,
    "search_context_size": "medium",
    "reasoning_effort": "medium",
    "model": "o3",
}
EFFORT_LEVELS = {"low", "medium", "high"}


def _int_from_env(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = str(env.get(name, "") or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d.", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%d: must be >= %d, using %d.", name, value, minimum, default)
        return default
    return value


def _level_from_env(env: Mapping[str, str], name: str, default: str) -> str:
    raw = str(env.get(name, "") or "").strip().lower()
    if not raw:
        return default
    if raw not in EFFORT_LEVELS:
        logger.warning(
            "Ignoring %s=%r: expected one of low, medium, high; using %s.",
            name,
            raw,
            default,
        )
        return default
    return raw


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> Configuration:
    env = os.environ if environ is None else environ
    cache_raw = str(env.get("DR_CACHE_DIR", "") or "").strip()
    extra: Dict[str, Any] = {}
    if cache_raw:
        extra["cache_dir"] = Path(cache_raw).expanduser()
    return Configuration(
        api_key=load_api_key(environ=env, env_file=env_file),
        max_retries=_int_from_env(env, "OPENAI_MAX_RETRIES", DEFAULTS["max_retries"], 0),
        timeout_ms=_int_from_env(env, "OPENAI_API_TIMEOUT", DEFAULTS["timeout_ms"], 1),
        search_context_size=_level_from_env(
            env, "SEARCH_CONTEXT_SIZE", DEFAULTS["search_context_size"]
        ),
        reasoning_effort=_level_from_env(env, "REASONING_EFFORT", DEFAULTS["reasoning_effort"]),
        model=str(env.get("OPENAI_MODEL", "") or "").strip() or DEFAULTS["model"],
        **extra,
    )
