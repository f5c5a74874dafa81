from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, AsyncIterator, Dict, List, Literal, Optional, Protocol, Sequence, Union

NodeKind = Literal["file", "dir"]
Tier = Literal["explicit", "model", "fallback"]
Severity = Literal["critical", "high", "medium", "low"]
Confidence = Literal["high", "medium"]
FindingSource = Literal["pattern", "model"]

MAX_SELECTED_FILES = 15
SEVERITIES: tuple[Severity, ...] = ("critical", "high", "medium", "low")
TERMINAL_EVENTS = frozenset({"done", "complete", "error"})


@dataclass
class TreeNode:
    name: str
    path: str
    kind: NodeKind
    size: int = 0
    children: List["TreeNode"] = field(default_factory=list)

    @property
    def is_dir(self) -> bool:
        return self.kind == "dir"


@dataclass
class FileRecord:
    path: str
    content: Optional[str] = None
    size: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.content is not None


@dataclass
class SelectionResult:
    files: List[str]
    reason: str
    tier: Tier

    def __post_init__(self) -> None:
        self.files = list(self.files)[:MAX_SELECTED_FILES]

    def to_serializable(self) -> Dict[str, Any]:
        return {
            "files": list(self.files),
            "reason": self.reason,
            "tier": self.tier,
            "count": len(self.files),
        }


@dataclass(frozen=True)
class IncludedFile:
    path: str
    truncated: bool = False


@dataclass(frozen=True)
class ContextAssembly:
    text: str
    total_tokens: int
    included: tuple[IncludedFile, ...] = ()
    skipped: tuple[str, ...] = ()

    def to_serializable(self) -> Dict[str, Any]:
        return {
            "totalTokens": self.total_tokens,
            "includedFiles": [{"path": f.path, "truncated": f.truncated} for f in self.included],
            "skippedFiles": list(self.skipped),
        }


@dataclass
class Finding:
    id: str
    file: str
    line: int
    type: str
    severity: Severity
    title: str
    description: str
    remediation: str
    confidence: Confidence
    source: FindingSource
    match: Optional[str] = None
    snippet: Optional[str] = None

    @property
    def key(self) -> tuple[str, int, str]:
        """Identity used for deduplication."""
        return (self.file, self.line, self.title)

    def to_serializable(self) -> Dict[str, Any]:
        payload = asdict(self)
        return {k: v for k, v in payload.items() if v is not None}


@dataclass(frozen=True)
class StreamEvent:
    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS

    def to_serializable(self) -> Dict[str, Any]:
        return {"type": self.type, "data": self.data}


# Collaborator contracts. The concrete clients live in repo_analyzer.github and
# repo_analyzer.agents; pipelines only depend on these shapes.
class SourceHost(Protocol):
    async def get_repo(self, owner: str, repo: str) -> Dict[str, Any]: ...
    async def get_contents(self, owner: str, repo: str, path: str = "") -> Union[Dict[str, Any], List[Dict[str, Any]]]: ...
    async def list_contributors(self, owner: str, repo: str, per_page: int = 10) -> List[Dict[str, Any]]: ...
    async def list_languages(self, owner: str, repo: str) -> Dict[str, int]: ...
    async def get_user(self, username: str) -> Dict[str, Any]: ...
    async def list_user_repos(self, username: str, sort: str = "updated", per_page: int = 10) -> List[Dict[str, Any]]: ...


class CompletionModel(Protocol):
    async def complete_json(self, system_prompt: str, prompt: str) -> Any: ...
    def stream_text(self, messages: Sequence[Dict[str, str]]) -> AsyncIterator[str]: ...
