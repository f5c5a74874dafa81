import asyncio
import base64
from typing import Any, AsyncIterator, Dict, List, Sequence

import pytest

from repo_analyzer.github import NotFoundError


def file_item(path: str, content: str) -> Dict[str, Any]:
    return {
        "type": "file",
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "size": len(content),
        "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
    }


def dir_entry(path: str) -> Dict[str, Any]:
    return {"type": "dir", "name": path.rsplit("/", 1)[-1], "path": path, "size": 0}


def file_entry(path: str, size: int = 10) -> Dict[str, Any]:
    return {"type": "file", "name": path.rsplit("/", 1)[-1], "path": path, "size": size}


class StubHost:
    """In-memory stand-in for the GitHub client.

    ``listings`` maps a directory path to its entries and ``files`` maps a
    file path to its text. Anything else raises NotFoundError; paths in
    ``failing`` raise RuntimeError.
    """

    def __init__(self, listings=None, files=None, failing=(), delay: float = 0.0):
        self.listings: Dict[str, List[Dict[str, Any]]] = listings or {}
        self.files: Dict[str, str] = files or {}
        self.failing = set(failing)
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.repo: Dict[str, Any] = {"name": "demo", "full_name": "octo/demo", "owner": {"login": "octo"}}
        self.user: Dict[str, Any] = {"login": "octo", "public_repos": 1}
        self.user_repos: List[Dict[str, Any]] = [{"name": "demo", "stargazers_count": 3}]
        self.contributors_error = False

    async def get_repo(self, owner, repo):
        if repo != self.repo["name"]:
            raise NotFoundError(f'Repository "{owner}/{repo}" not found')
        return self.repo

    async def get_contents(self, owner, repo, path=""):
        self.calls.append(path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if path in self.failing:
                raise RuntimeError(f"boom: {path}")
            if path in self.listings:
                return self.listings[path]
            if path in self.files:
                return file_item(path, self.files[path])
            raise NotFoundError(f"Not found: {path}")
        finally:
            self.in_flight -= 1

    async def list_contributors(self, owner, repo, per_page=10):
        if self.contributors_error:
            raise RuntimeError("contributors unavailable")
        return [{"login": "octo", "avatar_url": "a", "contributions": 7}]

    async def list_languages(self, owner, repo):
        return {"Python": 1000}

    async def get_user(self, username):
        if username != self.user["login"]:
            raise NotFoundError(f'User "{username}" not found')
        return self.user

    async def list_user_repos(self, username, sort="updated", per_page=10):
        return self.user_repos


class StubLLM:
    """Scripted completion model.

    ``replies`` are returned (or raised, when an exception) by successive
    ``complete_json`` calls; ``chunks`` are streamed by ``stream_text``.
    """

    def __init__(self, replies: Sequence[Any] = (), chunks: Sequence[str] = ("Hello", " world")):
        self.replies = list(replies)
        self.chunks = list(chunks)
        self.prompts: List[str] = []
        self.streamed_messages: List[List[Dict[str, str]]] = []

    async def complete_json(self, system_prompt: str, prompt: str) -> Any:
        self.prompts.append(prompt)
        if not self.replies:
            raise ValueError("no scripted reply")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def stream_text(self, messages) -> AsyncIterator[str]:
        self.streamed_messages.append(list(messages))
        for chunk in self.chunks:
            yield chunk


@pytest.fixture
def demo_host() -> StubHost:
    return StubHost(
        listings={
            "": [file_entry("README.md"), dir_entry("src"), dir_entry("node_modules"), file_entry("app.py")],
            "src": [file_entry("src/index.js"), dir_entry("src/lib")],
            "src/lib": [file_entry("src/lib/util.js")],
        },
        files={
            "README.md": "# Demo\n",
            "app.py": "import os\n\nos.system(request.args['cmd'])\n",
            "src/index.js": 'const apiKey = "sk-aaaaaaaaaaaaaaaaaaaaaaaa";\nconsole.log(apiKey);\n',
            "src/lib/util.js": "export const add = (a, b) => a + b;\n",
        },
    )
