"""
Core API for the Repository Analyzer

This is the main black-box API that can be used by any interface (CLI, web server, UI, etc.)
"""
import asyncio
import logging
from functools import partial
from typing import Any, AsyncIterator, Awaitable, Dict, List, Optional, TypeVar

from repo_analyzer.agents import LanguageModel
from repo_analyzer.github import GitHubClient, fetch_repo_data, fetch_user_profile, parse_github_input
from repo_analyzer.models import CompletionModel, SourceHost, StreamEvent
from repo_analyzer.pipelines import ChatRequest, ScanRequest, run_chat, run_scan
from repo_analyzer.streaming import stream_events
from repo_analyzer.utils.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestTimeoutError(TimeoutError):
    """A non-streamed request exceeded the pipeline wall-clock ceiling."""


class RepoAnalyzer:
    """
    Core API for repository analysis.

    This class provides a clean, interface-agnostic API for:
    - Fetching repository or profile overviews (metadata, tree, file list)
    - Streaming chat answers grounded in selected repository files
    - Streaming security scans combining pattern rules and model review

    The GitHub client and the language model are built once in initialize()
    and shared by every request afterwards.

    Usage:
        analyzer = await RepoAnalyzer().initialize()
        overview = await analyzer.fetch("octocat/Hello-World")
        async for event in analyzer.chat(query="What does this do?", owner="octocat", repo="Hello-World"):
            ...
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        github: Optional[SourceHost] = None,
        llm: Optional[CompletionModel] = None,
    ):
        """
        Args:
            settings: Runtime settings (defaults to Settings.from_env())
            github: Source-hosting client; built from settings when omitted
            llm: Language model handle; built from settings when omitted
        """
        self.settings = settings or Settings.from_env()
        self.github: Optional[SourceHost] = github
        self.llm: Optional[CompletionModel] = llm
        self._initialized = False

    async def initialize(self) -> "RepoAnalyzer":
        """
        Construct the collaborator clients that were not injected.

        Returns:
            Self for method chaining
        """
        logger.info("Initializing Repository Analyzer...")
        if self.github is None:
            self.github = GitHubClient(
                token=self.settings.github_token,
                base_url=self.settings.github_api_base,
                timeout=self.settings.http_timeout,
            )
            if not self.settings.github_token:
                logger.warning("⚠️  GITHUB_TOKEN not set; GitHub API rate limits will be low")
        if self.llm is None:
            self.llm = LanguageModel(model_name=self.settings.model_name)
        self._initialized = True
        logger.info("Repository Analyzer initialized successfully!")
        return self

    def is_initialized(self) -> bool:
        """Check if the system has been initialized."""
        return self._initialized

    def _require(self) -> tuple[SourceHost, CompletionModel]:
        if not self._initialized or self.github is None or self.llm is None:
            raise RuntimeError("System not initialized. Call initialize() first.")
        return self.github, self.llm

    async def fetch(self, raw_input: str) -> Dict[str, Any]:
        """
        Fetch a repository or profile overview.

        Args:
            raw_input: GitHub URL, ``owner/repo`` or username

        Returns:
            ``{"type": "repo" | "profile", "data": {...}}``

        Raises:
            InvalidInputError: If the input is empty or unparsable
            NotFoundError: If the repository or user does not exist
            RequestTimeoutError: If the lookup exceeds the pipeline timeout
        """
        github, _ = self._require()
        target = parse_github_input(raw_input)
        if target.type == "repo":
            data = await self._within_deadline(
                fetch_repo_data(github, target.owner, target.repo or "", self.settings.max_tree_depth)
            )
            logger.info("✅ Fetched repository %s/%s (%d files)", target.owner, target.repo, data["fileCount"])
            return {"type": "repo", "data": data}
        data = await self._within_deadline(fetch_user_profile(github, target.owner))
        logger.info("✅ Fetched profile %s", target.owner)
        return {"type": "profile", "data": data}

    async def ensure_repo(self, owner: str, repo: str) -> Dict[str, Any]:
        """
        Confirm the repository exists before a chat or scan stream starts.

        Raises:
            NotFoundError: If the repository does not exist
            RequestTimeoutError: If the lookup exceeds the pipeline timeout
        """
        github, _ = self._require()
        return await self._within_deadline(github.get_repo(owner, repo))

    async def _within_deadline(self, operation: Awaitable[T]) -> T:
        timeout = self.settings.pipeline_timeout
        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                return await operation
        except TimeoutError:
            if deadline.expired():
                logger.warning("⏱️  Request exceeded %ss", timeout)
                raise RequestTimeoutError(f"Request timed out after {timeout:g} seconds") from None
            raise

    def chat(
        self,
        query: str,
        owner: str,
        repo: str,
        history: Optional[List[Dict[str, str]]] = None,
        tree: Optional[str] = None,
        repo_details: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[StreamEvent]:
        """
        Stream a chat answer: status → files → status → chunk* → status → done.

        Callers surface a missing repository first with ensure_repo().

        Raises:
            RuntimeError: If system is not initialized
        """
        github, llm = self._require()
        request = ChatRequest(
            query=query,
            owner=owner,
            repo=repo,
            history=list(history or []),
            tree=tree,
            repo_details=repo_details,
        )
        producer = partial(run_chat, request=request, github=github, llm=llm, settings=self.settings)
        return stream_events(producer, timeout=self.settings.pipeline_timeout)

    def scan(self, owner: str, repo: str, file_paths: List[str]) -> AsyncIterator[StreamEvent]:
        """
        Stream a security scan: status* → complete.

        Raises:
            RuntimeError: If system is not initialized
        """
        github, llm = self._require()
        request = ScanRequest(owner=owner, repo=repo, file_paths=list(file_paths))
        producer = partial(run_scan, request=request, github=github, llm=llm, settings=self.settings)
        return stream_events(producer, timeout=self.settings.pipeline_timeout)

    async def aclose(self) -> None:
        """Release the HTTP connection pool of the GitHub client."""
        close = getattr(self.github, "aclose", None)
        if close is not None:
            await close()
