"""FastAPI application for the Repository Analyzer.

The server is a class-based wrapper (no global mutable state): the analyzer
and its GitHub / language-model clients are built once in the lifespan hook
and reused by every request.

`app` is exported for `uvicorn server.app:app`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing, asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.requests import Request

from repo_analyzer import RepoAnalyzer, RequestTimeoutError
from repo_analyzer.github import GitHubError, InvalidInputError, NotFoundError
from repo_analyzer.models import StreamEvent
from repo_analyzer.streaming import format_sse
from repo_analyzer.utils.settings import Settings


def configure_logging(level: int = logging.INFO) -> None:
    """Configure logging for the server."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        force=True,
    )
    logging.getLogger("repo_analyzer").setLevel(level)
    logging.getLogger("server").setLevel(level)


logger = logging.getLogger(__name__)


# ============================================================================
# Request/Response Models
# ============================================================================


class FetchRequest(BaseModel):
    """Request model for fetching a repository or profile overview."""

    input: str = Field(..., min_length=1, description="GitHub URL, owner/repo, or username")


class FetchResponse(BaseModel):
    """Response model for the fetch operation."""

    type: str = Field(..., description="Either 'repo' or 'profile'")
    data: Dict[str, Any] = Field(..., description="Metadata plus tree rendering and file paths for repos")


class HistoryMessage(BaseModel):
    """One prior conversation turn."""

    role: str = Field(..., description="user, assistant or model")
    content: str = Field(..., description="Message text")


class ChatRequest(BaseModel):
    """Request model for a streamed chat answer."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(..., min_length=1, description="Question about the repository")
    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")
    history: List[HistoryMessage] = Field(default_factory=list, description="Prior conversation turns")
    tree: Optional[str] = Field(None, description="Tree rendering from a previous fetch")
    repo_details: Optional[Dict[str, Any]] = Field(
        None, alias="repoDetails", description="Repository metadata from a previous fetch"
    )


class ScanRequest(BaseModel):
    """Request model for a streamed security scan."""

    model_config = ConfigDict(populate_by_name=True)

    owner: str = Field(..., min_length=1, description="Repository owner")
    repo: str = Field(..., min_length=1, description="Repository name")
    file_paths: List[str] = Field(default_factory=list, alias="filePaths", description="Candidate file paths")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Server health status")
    system_ready: bool = Field(..., description="Whether the system is ready")


async def sse_stream(request: Request, events: AsyncIterator[StreamEvent]) -> AsyncIterator[str]:
    """Frame events as SSE, stopping quietly when the client disconnects."""
    async with aclosing(events) as stream:
        async for event in stream:
            if await request.is_disconnected():
                logger.info("👋 Client disconnected; stopping stream")
                break
            yield format_sse(event)


SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"}


class RepoAnalyzerServer:
    """Encapsulates FastAPI app + RepoAnalyzer lifecycle."""

    def __init__(self, *, log_level: int = logging.INFO, settings: Optional[Settings] = None) -> None:
        configure_logging(log_level)
        self.settings = settings
        self.system: Optional[RepoAnalyzer] = None

    @asynccontextmanager
    async def lifespan(self, app: FastAPI) -> AsyncIterator[None]:
        """Lifespan event handler for startup and shutdown."""
        logger.info("=" * 70)
        logger.info("🚀 REPOSITORY ANALYZER SERVER STARTING")
        logger.info("=" * 70)

        try:
            self.system = RepoAnalyzer(settings=self.settings)
            logger.info("⚙️  Initializing core system...")
            await self.system.initialize()
            logger.info("✅ Server ready!")
            logger.info("=" * 70)
        except Exception as e:
            logger.error(f"❌ Failed to initialize system: {e}")
            # Continue anyway - API will return 503 until ready.

        yield

        logger.info("👋 Server shutting down...")
        if self.system is not None:
            await self.system.aclose()

    def create_app(self) -> FastAPI:
        """Create and configure a FastAPI application instance."""
        app = FastAPI(
            title="Repository Analyzer API",
            description="Chat with GitHub repositories and scan them for security issues",
            version="1.0.0",
            lifespan=self.lifespan,
        )

        origins = list((self.settings or Settings.from_env()).cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials="*" not in origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        def require_system() -> RepoAnalyzer:
            if self.system is None or not self.system.is_initialized():
                raise HTTPException(
                    status_code=503,
                    detail="System not initialized. Please wait for initialization to complete.",
                )
            return self.system

        async def require_repository(system: RepoAnalyzer, owner: str, repo: str) -> None:
            try:
                await system.ensure_repo(owner, repo)
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            except RequestTimeoutError as e:
                raise HTTPException(status_code=504, detail=str(e))
            except GitHubError as e:
                logger.error(f"❌ GitHub request failed: {e}")
                raise HTTPException(status_code=502, detail=f"GitHub request failed: {str(e)}")

        @app.get("/", tags=["General"])
        async def root() -> dict[str, Any]:
            return {
                "name": "Repository Analyzer API",
                "version": "1.0.0",
                "docs": "/docs",
                "health": "/health",
                "validEndpoints": [
                    "GET /health",
                    "POST /fetch",
                    "POST /chat",
                    "POST /scan",
                ],
            }

        @app.get("/health", response_model=HealthResponse, tags=["General"])
        async def health_check() -> HealthResponse:
            system_ready = self.system is not None and self.system.is_initialized()
            return HealthResponse(status="healthy", system_ready=system_ready)

        @app.post("/fetch", response_model=FetchResponse, tags=["Repository"])
        async def fetch(request: FetchRequest) -> FetchResponse:
            system = require_system()
            try:
                logger.info(f"🔍 Fetch: {request.input[:100]}")
                result = await system.fetch(request.input)
                return FetchResponse(**result)
            except InvalidInputError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))
            except RequestTimeoutError as e:
                raise HTTPException(status_code=504, detail=str(e))
            except GitHubError as e:
                logger.error(f"❌ GitHub request failed: {e}")
                raise HTTPException(status_code=502, detail=f"GitHub request failed: {str(e)}")

        @app.post("/chat", tags=["Chat"])
        async def chat(request: ChatRequest, http_request: Request) -> StreamingResponse:
            system = require_system()
            logger.info(f"💬 Chat {request.owner}/{request.repo}: {request.query[:100]}...")
            await require_repository(system, request.owner, request.repo)
            events = system.chat(
                query=request.query,
                owner=request.owner,
                repo=request.repo,
                history=[m.model_dump() for m in request.history],
                tree=request.tree,
                repo_details=request.repo_details,
            )
            return StreamingResponse(
                sse_stream(http_request, events), media_type="text/event-stream", headers=SSE_HEADERS
            )

        @app.post("/scan", tags=["Security"])
        async def scan(request: ScanRequest, http_request: Request) -> StreamingResponse:
            system = require_system()
            logger.info(f"🔐 Scan {request.owner}/{request.repo}: {len(request.file_paths)} candidate files")
            await require_repository(system, request.owner, request.repo)
            events = system.scan(owner=request.owner, repo=request.repo, file_paths=request.file_paths)
            return StreamingResponse(
                sse_stream(http_request, events), media_type="text/event-stream", headers=SSE_HEADERS
            )

        @app.exception_handler(404)
        async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
            detail = exc.detail if isinstance(exc, HTTPException) else "The requested endpoint does not exist"
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Not Found",
                    "detail": detail,
                    "docs": "/docs",
                },
            )

        @app.exception_handler(500)
        async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
            logger.exception("Internal server error")
            return JSONResponse(
                status_code=500,
                content={"error": "Internal Server Error", "detail": "An unexpected error occurred"},
            )

        return app


def create_app() -> FastAPI:
    """Factory for creating an app instance (useful for tests/uvicorn)."""
    return RepoAnalyzerServer().create_app()


app = create_app()
