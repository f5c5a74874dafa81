"""Budgeted context assembly"""
from .assembler import MIN_PARTIAL_TOKENS, SAFETY_BUFFER_TOKENS, build_context
from .tokens import (
    CHARS_PER_TOKEN,
    TRUNCATION_MARKER,
    TokenEstimator,
    check_context_fits,
    count_history_tokens,
    count_message_tokens,
    estimate_tokens,
    truncate_to_token_limit,
)

__all__ = [
    "CHARS_PER_TOKEN",
    "MIN_PARTIAL_TOKENS",
    "SAFETY_BUFFER_TOKENS",
    "TRUNCATION_MARKER",
    "TokenEstimator",
    "build_context",
    "check_context_fits",
    "count_history_tokens",
    "count_message_tokens",
    "estimate_tokens",
    "truncate_to_token_limit",
]
