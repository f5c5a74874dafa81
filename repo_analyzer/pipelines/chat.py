import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from repo_analyzer.agents.selector import select_relevant_files
from repo_analyzer.agents.system_prompt import SYSTEM_PROMPT, build_repository_context
from repo_analyzer.context import build_context, check_context_fits, count_history_tokens
from repo_analyzer.github.fetcher import fetch_files_batch
from repo_analyzer.github.tree import build_file_tree, tree_to_string
from repo_analyzer.models import CompletionModel, SourceHost
from repo_analyzer.streaming import EventChannel
from repo_analyzer.utils.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ChatRequest:
    query: str
    owner: str
    repo: str
    history: List[Dict[str, str]] = field(default_factory=list)
    tree: Optional[str] = None
    repo_details: Optional[Dict[str, Any]] = None


def recent_history(history: List[Dict[str, str]], window: int) -> List[Dict[str, str]]:
    """Last ``window`` turns with roles normalised for the chat model."""
    turns = history[-window:] if window > 0 else []
    return [
        {
            "role": "assistant" if msg.get("role") == "model" else msg.get("role", "user"),
            "content": str(msg.get("content", "")),
        }
        for msg in turns
    ]


async def run_chat(
    channel: EventChannel,
    request: ChatRequest,
    github: SourceHost,
    llm: CompletionModel,
    settings: Settings,
) -> None:
    """Select files, assemble context and stream the model's answer."""
    channel.status("Analyzing query...", 10)

    tree = request.tree
    if not tree:
        nodes = await build_file_tree(github, request.owner, request.repo, max_depth=settings.max_tree_depth)
        tree = tree_to_string(nodes)

    selection = await select_relevant_files(llm, request.query, tree, request.owner, request.repo)
    channel.files(selection)

    channel.status(f"Fetching {len(selection.files)} files...", 30)
    records = await fetch_files_batch(
        github, request.owner, request.repo, selection.files, max_concurrent=settings.fetch_concurrency
    )

    history = recent_history(request.history, settings.history_window)
    assembly = build_context(
        records,
        max_tokens=settings.context_token_budget,
        reserved_tokens=count_history_tokens(history),
    )

    usage = check_context_fits(assembly.text, history, limit=settings.context_token_budget)
    logger.info("🧮 Context uses %s%% of the token budget", usage["percentUsed"])

    channel.status("Generating response...", 60)
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": build_repository_context(request.owner, request.repo, assembly.text, request.repo_details),
        },
        *history,
        {"role": "user", "content": request.query},
    ]

    async for text in llm.stream_text(messages):
        if not channel.chunk(text):
            logger.info("Channel closed; dropping remaining model output")
            break

    channel.status("Complete", 100)
    channel.done({"context": assembly.to_serializable(), "usage": usage})
