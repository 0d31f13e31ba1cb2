from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_MAX_CALL_DEPTH = 50
DEFAULT_MAX_NESTING = 80
DEFAULT_STATEMENT_CACHE = 1024


def flag_from_env(var: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get(var, "").strip().lower() in _TRUTHY


def int_from_env(var: str, default: int, environ: Optional[Mapping[str, str]] = None) -> int:
    env = os.environ if environ is None else environ
    raw = env.get(var)
    if raw is None or not raw.strip():
        return default

    try:
        return max(0, int(raw.strip()))
    except ValueError:
        logger.warning("ignoring %s=%r: not an integer", var, raw)
        return default


def debug_py_trace_enabled() -> bool:
    """Read live so the REPL can toggle it."""
    return flag_from_env("JIST_DEBUG_PY_TRACE")


@dataclass(frozen=True)
class Settings:
    max_call_depth: int = DEFAULT_MAX_CALL_DEPTH
    max_nesting: int = DEFAULT_MAX_NESTING  # 0 = unlimited
    max_loop_iterations: int = 0  # 0 = unlimited
    strict: bool = False
    log_level: str = "WARNING"
    statement_cache: int = DEFAULT_STATEMENT_CACHE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ

        return cls(
            max_call_depth=int_from_env("JIST_MAX_CALL_DEPTH", DEFAULT_MAX_CALL_DEPTH, env),
            max_nesting=int_from_env("JIST_MAX_NESTING", DEFAULT_MAX_NESTING, env),
            max_loop_iterations=int_from_env("JIST_MAX_LOOP_ITERATIONS", 0, env),
            strict=flag_from_env("JIST_STRICT", env),
            log_level=env.get("JIST_LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
            statement_cache=int_from_env("JIST_STATEMENT_CACHE", DEFAULT_STATEMENT_CACHE, env),
        )
