import logging
from typing import List, Sequence

from repo_analyzer.agents.system_prompt import SELECTION_SYSTEM_PROMPT, build_selection_prompt
from repo_analyzer.github.tree import parse_tree_lines
from repo_analyzer.models import MAX_SELECTED_FILES, CompletionModel, SelectionResult

logger = logging.getLogger(__name__)

EXPLICIT_REASON = "Files explicitly mentioned in query"
FALLBACK_REASON = "Fallback to common entry files"
DEFAULT_FILES: Sequence[str] = ("README.md", "package.json", "src/index.js", "src/App.jsx")


def find_mentioned_files(query: str, tree: str) -> List[str]:
    """Paths of tree files whose name appears (case-insensitively) in the query."""
    query_lower = query.lower()
    found: List[str] = []
    for entry in parse_tree_lines(tree or ""):
        if entry.has_children:
            continue
        if entry.name.lower() in query_lower and entry.path not in found:
            found.append(entry.path)
    return found


async def select_model_files(llm: CompletionModel, query: str, tree: str, owner: str, repo: str) -> SelectionResult:
    """Ask the model for relevant files.

    Raises:
        ValueError: if the reply is not JSON or lacks a list of file paths.
    """
    parsed = await llm.complete_json(
        SELECTION_SYSTEM_PROMPT,
        build_selection_prompt(query, tree, owner, repo, MAX_SELECTED_FILES),
    )
    if not isinstance(parsed, dict):
        raise ValueError("File selection reply is not a JSON object")
    files = parsed.get("files")
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise ValueError("File selection reply has no 'files' list")
    reason = parsed.get("reason")
    return SelectionResult(
        files=[f.strip().lstrip("/") for f in files if f.strip()],
        reason=str(reason) if reason else "Selected by model",
        tier="model",
    )


async def select_relevant_files(llm: CompletionModel, query: str, tree: str, owner: str, repo: str) -> SelectionResult:
    """Pick files for a query: explicit mentions, then the model, then defaults.

    Never raises; the fallback tier always produces a result.
    """
    mentioned = find_mentioned_files(query, tree)
    if mentioned:
        logger.info("📌 %d files mentioned explicitly", len(mentioned))
        return SelectionResult(files=mentioned, reason=EXPLICIT_REASON, tier="explicit")

    try:
        result = await select_model_files(llm, query, tree, owner, repo)
        logger.info("🤖 Model selected %d files", len(result.files))
        return result
    except Exception as e:
        logger.warning("⚠️  Model file selection failed, using defaults: %s", e)
        return SelectionResult(files=list(DEFAULT_FILES), reason=FALLBACK_REASON, tier="fallback")
