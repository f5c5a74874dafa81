"""
CLI Application Logic

Provides an interactive command-line interface for the Repository Analyzer.
"""
import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from repo_analyzer import RepoAnalyzer, RequestTimeoutError
from repo_analyzer.github import GitHubError, InvalidInputError
from repo_analyzer.utils.settings import Settings

logger = logging.getLogger(__name__)


async def ask(system: RepoAnalyzer, repo_data: Dict[str, Any], query: str, history: List[Dict[str, str]]) -> str:
    """Stream one chat answer to stdout and return the full text."""
    answer: List[str] = []
    async for event in system.chat(
        query=query,
        owner=repo_data["owner"]["login"],
        repo=repo_data["name"],
        history=history,
        tree=repo_data.get("tree"),
        repo_details=repo_data,
    ):
        if event.type == "status":
            logger.info("⏳ %s (%s%%)", event.data["message"], event.data["progress"])
        elif event.type == "files":
            logger.info("📂 Files (%s): %s", event.data["tier"], ", ".join(event.data["files"]) or "none")
        elif event.type == "chunk":
            answer.append(event.data["content"])
            print(event.data["content"], end="", flush=True)
        elif event.type == "done":
            print()
            context = event.data.get("context", {})
            logger.info("🧮 Context: %s tokens", context.get("totalTokens", 0))
        elif event.type == "error":
            logger.error("❌ %s", event.data["message"])
    return "".join(answer)


async def scan(system: RepoAnalyzer, repo_data: Dict[str, Any]) -> None:
    """Run a security scan and log the findings by severity."""
    async for event in system.scan(
        owner=repo_data["owner"]["login"], repo=repo_data["name"], file_paths=repo_data.get("filePaths", [])
    ):
        if event.type == "status":
            logger.info("⏳ %s (%s%%)", event.data["message"], event.data["progress"])
        elif event.type == "complete":
            logger.info("\n🔐 %s", event.data["summary"])
            for finding in event.data["findings"]:
                logger.info(
                    "  [%s] %s:%s %s", finding["severity"].upper(), finding["file"], finding["line"], finding["title"]
                )
            if event.data.get("modelError"):
                logger.warning("⚠️  %s", event.data["modelError"])
        elif event.type == "error":
            logger.error("❌ %s", event.data["message"])


async def interactive_session(system: RepoAnalyzer) -> None:
    """
    Run an interactive session against one repository at a time.

    Args:
        system: Initialized RepoAnalyzer instance
    """
    if not system.is_initialized():
        logger.error("System is not initialized. Cannot start interactive session.")
        return

    logger.info("\n%s", "=" * 70)
    logger.info("💬 INTERACTIVE REPOSITORY ANALYZER")
    logger.info("%s", "=" * 70)

    repo_data: Optional[Dict[str, Any]] = None
    history: List[Dict[str, str]] = []

    while True:
        try:
            if repo_data is None:
                raw = input("\n📦 Repository (URL, owner/repo or username; 'exit' to quit): ").strip()
                if raw.lower() == "exit":
                    logger.info("\n👋 Goodbye!")
                    break
                try:
                    result = await system.fetch(raw)
                except (InvalidInputError, GitHubError, RequestTimeoutError) as e:
                    logger.error("❌ %s", e)
                    continue
                if result["type"] == "profile":
                    profile = result["data"]
                    logger.info("\n👤 %s (%s public repos)", profile.get("login"), profile.get("public_repos"))
                    for item in profile.get("repos", []):
                        logger.info("  - %s ★%s", item.get("name"), item.get("stargazers_count"))
                    continue
                repo_data = result["data"]
                history = []
                logger.info("✅ Loaded %s (%d files)", repo_data["full_name"], repo_data["fileCount"])
                continue

            step = input("\n🔄 Step (🤔 ask, 🔐 scan, 🌳 tree, 📦 switch, 👋 exit): ").strip().lower()

            if step == "ask":
                query = input("\n🤔 Your question: ").strip()
                if not query:
                    continue
                answer = await ask(system, repo_data, query, history)
                history.extend([{"role": "user", "content": query}, {"role": "assistant", "content": answer}])
                continue

            if step == "scan":
                await scan(system, repo_data)
                continue

            if step == "tree":
                logger.info("\n🌳 %s\n%s", repo_data["full_name"], repo_data.get("displayTree") or repo_data["tree"])
                continue

            if step == "switch":
                repo_data = None
                continue

            if step == "exit":
                logger.info("\n👋 Goodbye!")
                break

            logger.warning("❓ Unknown command: %s", step)
        except KeyboardInterrupt:
            logger.info("\n👋 Goodbye!")
            break
        except Exception as e:
            logger.exception("❌ Error during command: %s", e)


async def run_cli(model_name: Optional[str] = None, interactive: bool = True) -> RepoAnalyzer:
    """
    Run the CLI application.

    Args:
        model_name: LLM model to use (defaults to LLM_MODEL)
        interactive: Whether to start interactive session

    Returns:
        Initialized RepoAnalyzer instance
    """
    logger.info("=" * 70)
    logger.info("🚀 REPOSITORY ANALYZER CLI")
    logger.info("=" * 70)

    logger.info("⚙️  Initializing system...")
    settings = Settings.from_env()
    if model_name:
        settings = replace(settings, model_name=model_name)
    system = RepoAnalyzer(settings=settings)

    try:
        await system.initialize()
        if interactive:
            await interactive_session(system)
    finally:
        await system.aclose()

    return system


async def main() -> None:
    """Default CLI entry point with standard configuration."""
    await run_cli(interactive=True)
