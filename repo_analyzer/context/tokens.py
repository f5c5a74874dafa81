"""Character-based token estimation.

The estimate is deliberately coarse (about four characters per token for
GPT-style tokenizers). Callers that need another heuristic pass their own
``TokenEstimator`` instead of changing this one.
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

CHARS_PER_TOKEN = 4
MESSAGE_OVERHEAD_TOKENS = 4
SAFE_CONTEXT_TOKENS = 80_000
TRUNCATION_MARKER = "\n\n[... content truncated due to length ...]"

TokenEstimator = Callable[[str], int]


def estimate_tokens(text: Optional[str]) -> int:
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def count_message_tokens(message: Union[Mapping[str, Any], str, None], estimator: TokenEstimator = estimate_tokens) -> int:
    if not message:
        return 0
    content = message.get("content", "") if isinstance(message, Mapping) else message
    return estimator(str(content or "")) + MESSAGE_OVERHEAD_TOKENS


def count_history_tokens(history: Optional[Iterable[Mapping[str, Any]]], estimator: TokenEstimator = estimate_tokens) -> int:
    if not history:
        return 0
    return sum(count_message_tokens(msg, estimator) for msg in history)


def check_context_fits(
    context: str,
    history: Optional[Iterable[Mapping[str, Any]]] = None,
    limit: int = SAFE_CONTEXT_TOKENS,
) -> Dict[str, Any]:
    context_tokens = estimate_tokens(context)
    history_tokens = count_history_tokens(history)
    total = context_tokens + history_tokens
    return {
        "contextTokens": context_tokens,
        "historyTokens": history_tokens,
        "totalTokens": total,
        "fits": total < limit,
        "remaining": limit - total,
        "percentUsed": round(total / limit * 100) if limit else 100,
    }


def truncate_to_token_limit(text: str, max_tokens: int) -> tuple[str, bool]:
    """Cut ``text`` to roughly ``max_tokens``, preferring a line boundary.

    Returns the (possibly marked) text and whether it was truncated.
    """
    if estimate_tokens(text) <= max_tokens:
        return text, False

    max_chars = max(max_tokens, 0) * CHARS_PER_TOKEN
    cut = text[:max_chars]
    last_newline = cut.rfind("\n")
    if last_newline > max_chars * 0.8:
        cut = cut[:last_newline]
    return cut + TRUNCATION_MARKER, True
