"""Repository and profile overviews for the fetch operation."""
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from repo_analyzer.github.tree import build_file_tree, get_file_paths, prune_file_tree, tree_to_string
from repo_analyzer.models import SourceHost

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"github\.com/([^/\s]+)(?:/([^/\s]+))?")


class InvalidInputError(ValueError):
    """The fetch input could not be interpreted as a user or repository."""


@dataclass(frozen=True)
class GitHubTarget:
    type: str  # "repo" or "profile"
    owner: str
    repo: Optional[str] = None


def parse_github_input(raw: str) -> GitHubTarget:
    """Interpret a GitHub URL, ``owner/repo`` or bare username."""
    text = (raw or "").strip()
    if not text:
        raise InvalidInputError("Input is required")

    match = _URL_RE.search(text)
    if match:
        owner, repo = match.group(1), match.group(2)
        if repo:
            return GitHubTarget("repo", owner, re.sub(r"\.git$", "", repo))
        return GitHubTarget("profile", owner)

    if "/" in text:
        owner, _, rest = text.partition("/")
        repo = rest.split("/")[0]
        if owner and repo:
            return GitHubTarget("repo", owner, re.sub(r"\.git$", "", repo))
        raise InvalidInputError(f"Could not parse repository from {text!r}")

    return GitHubTarget("profile", text)


async def _optional(label: str, coro: Any, default: Any) -> Any:
    try:
        return await coro
    except Exception as e:
        logger.warning("⚠️  Optional %s lookup failed: %s", label, e)
        return default


async def fetch_repo_data(client: SourceHost, owner: str, repo: str, max_depth: int = 4) -> Dict[str, Any]:
    """Repository metadata plus the derived tree rendering and file list.

    Raises:
        NotFoundError: if the repository does not exist.
    """
    repo_data = await client.get_repo(owner, repo)

    tree = await build_file_tree(client, owner, repo, max_depth=max_depth)
    file_paths = get_file_paths(tree)

    contributors = await _optional("contributors", client.list_contributors(owner, repo, per_page=10), [])
    languages = await _optional("languages", client.list_languages(owner, repo), {})

    owner_data = repo_data.get("owner") or {}
    license_data = repo_data.get("license") or {}
    return {
        "name": repo_data.get("name"),
        "full_name": repo_data.get("full_name"),
        "description": repo_data.get("description"),
        "owner": {
            "login": owner_data.get("login"),
            "avatar_url": owner_data.get("avatar_url"),
        },
        "stargazers_count": repo_data.get("stargazers_count"),
        "forks_count": repo_data.get("forks_count"),
        "watchers_count": repo_data.get("watchers_count"),
        "open_issues_count": repo_data.get("open_issues_count"),
        "default_branch": repo_data.get("default_branch"),
        "language": repo_data.get("language"),
        "languages": languages,
        "topics": repo_data.get("topics") or [],
        "created_at": repo_data.get("created_at"),
        "updated_at": repo_data.get("updated_at"),
        "pushed_at": repo_data.get("pushed_at"),
        "license": license_data.get("name"),
        "contributors": [
            {
                "login": c.get("login"),
                "avatar_url": c.get("avatar_url"),
                "contributions": c.get("contributions"),
            }
            for c in contributors
        ],
        "html_url": repo_data.get("html_url"),
        "clone_url": repo_data.get("clone_url"),
        "tree": tree_to_string(tree),
        "displayTree": tree_to_string(prune_file_tree(tree)),
        "filePaths": file_paths,
        "fileCount": len(file_paths),
    }


async def fetch_user_profile(client: SourceHost, username: str) -> Dict[str, Any]:
    """User profile plus the ten most recently updated repositories.

    Raises:
        NotFoundError: if the user does not exist.
    """
    user = await client.get_user(username)
    repos: List[Dict[str, Any]] = await _optional(
        "repositories", client.list_user_repos(username, sort="updated", per_page=10), []
    )
    return {
        "login": user.get("login"),
        "name": user.get("name"),
        "avatar_url": user.get("avatar_url"),
        "bio": user.get("bio"),
        "company": user.get("company"),
        "location": user.get("location"),
        "blog": user.get("blog"),
        "twitter_username": user.get("twitter_username"),
        "public_repos": user.get("public_repos"),
        "followers": user.get("followers"),
        "following": user.get("following"),
        "created_at": user.get("created_at"),
        "repos": [
            {
                "name": r.get("name"),
                "full_name": r.get("full_name"),
                "description": r.get("description"),
                "language": r.get("language"),
                "stargazers_count": r.get("stargazers_count"),
                "forks_count": r.get("forks_count"),
                "updated_at": r.get("updated_at"),
            }
            for r in repos
        ],
    }
