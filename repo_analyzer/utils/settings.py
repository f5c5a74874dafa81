"""Runtime settings read from the environment.

Entrypoints call ``load_dotenv()`` first, so values from a ``.env`` file are
visible here.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

MAX_TREE_DEPTH_CEILING = 5


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    github_token: Optional[str] = None
    github_api_base: str = "https://api.github.com"
    model_name: str = "gpt-4o-mini"
    max_tree_depth: int = 4
    fetch_concurrency: int = 5
    context_token_budget: int = 80_000
    history_window: int = 10
    max_scan_files: int = 20
    pipeline_timeout: float = 60.0
    http_timeout: float = 30.0
    cors_origins: Tuple[str, ...] = field(default=("*",))

    def __post_init__(self) -> None:
        if self.max_tree_depth > MAX_TREE_DEPTH_CEILING:
            logger.warning(
                "MAX_TREE_DEPTH=%d exceeds ceiling, using %d", self.max_tree_depth, MAX_TREE_DEPTH_CEILING
            )
            object.__setattr__(self, "max_tree_depth", MAX_TREE_DEPTH_CEILING)
        if self.fetch_concurrency < 1:
            raise ValueError("FETCH_CONCURRENCY must be at least 1")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            github_token=os.getenv("GITHUB_TOKEN") or None,
            github_api_base=os.getenv("GITHUB_API_BASE", "https://api.github.com").rstrip("/"),
            model_name=os.getenv("LLM_MODEL", "gpt-4o-mini"),
            max_tree_depth=_env_int("MAX_TREE_DEPTH", 4),
            fetch_concurrency=_env_int("FETCH_CONCURRENCY", 5),
            context_token_budget=_env_int("CONTEXT_TOKEN_BUDGET", 80_000),
            history_window=_env_int("HISTORY_WINDOW", 10),
            max_scan_files=_env_int("MAX_SCAN_FILES", 20),
            pipeline_timeout=_env_float("PIPELINE_TIMEOUT", 60.0),
            http_timeout=_env_float("HTTP_TIMEOUT", 30.0),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
        )
