import logging
from typing import Iterable, List

from repo_analyzer.context.tokens import SAFE_CONTEXT_TOKENS, TokenEstimator, estimate_tokens, truncate_to_token_limit
from repo_analyzer.models import ContextAssembly, FileRecord, IncludedFile

logger = logging.getLogger(__name__)

SAFETY_BUFFER_TOKENS = 100
MIN_PARTIAL_TOKENS = 500


def file_header(path: str) -> str:
    return f"\n--- FILE: {path} ---\n"


def build_context(
    files: Iterable[FileRecord],
    max_tokens: int = SAFE_CONTEXT_TOKENS,
    reserved_tokens: int = 0,
    estimator: TokenEstimator = estimate_tokens,
) -> ContextAssembly:
    """Concatenate file bodies, in the given order, into a budgeted context.

    Files without content are ignored. The first file that does not fit is
    truncated when more than MIN_PARTIAL_TOKENS remain after the safety
    buffer, otherwise skipped; either way assembly stops there and any later
    files are reported as skipped. Pure: same input, same output.
    """
    budget = max_tokens - max(reserved_tokens, 0)
    parts: List[str] = []
    total = 0
    included: List[IncludedFile] = []
    skipped: List[str] = []

    records = [f for f in files if f.content is not None]
    for index, record in enumerate(records):
        block = file_header(record.path) + record.content + "\n"
        cost = estimator(block)

        if total + cost <= budget:
            parts.append(block)
            total += cost
            included.append(IncludedFile(record.path, truncated=False))
            continue

        remaining = budget - total - SAFETY_BUFFER_TOKENS
        if remaining > MIN_PARTIAL_TOKENS:
            text, was_truncated = truncate_to_token_limit(record.content, remaining)
            partial = file_header(record.path) + text + "\n"
            parts.append(partial)
            total += estimator(partial)
            included.append(IncludedFile(record.path, truncated=was_truncated))
        else:
            skipped.append(record.path)
        skipped.extend(r.path for r in records[index + 1:])
        break

    if skipped:
        logger.info("✂️  Context budget reached: %d files skipped", len(skipped))
    return ContextAssembly(
        text="".join(parts),
        total_tokens=total,
        included=tuple(included),
        skipped=tuple(skipped),
    )
