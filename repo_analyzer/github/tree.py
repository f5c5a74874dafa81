import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import FrozenSet, Iterable, List

from repo_analyzer.models import SourceHost, TreeNode
from repo_analyzer.utils.settings import MAX_TREE_DEPTH_CEILING

logger = logging.getLogger(__name__)

SKIP_DIRS: FrozenSet[str] = frozenset({
    "node_modules", ".git", "dist", "build", ".next",
    "__pycache__", "vendor", ".cache", "coverage",
})

# Display-only pruning
SKIP_EXTENSIONS: FrozenSet[str] = frozenset({
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".webp",
    ".mp3", ".mp4", ".wav", ".avi", ".mov",
    ".zip", ".tar", ".gz", ".rar",
    ".pdf", ".doc", ".docx",
    ".lock", ".log",
    ".woff", ".woff2", ".ttf", ".eot",
})
SKIP_FILES: FrozenSet[str] = frozenset({
    "package-lock.json", "yarn.lock", "pnpm-lock.yaml", ".DS_Store", "Thumbs.db",
})

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


def _sort_key(node: TreeNode) -> tuple:
    return (0 if node.is_dir else 1, node.name.casefold(), node.name)


async def build_file_tree(
    client: SourceHost,
    owner: str,
    repo: str,
    path: str = "",
    depth: int = 0,
    max_depth: int = 4,
    skip_dirs: FrozenSet[str] = SKIP_DIRS,
) -> List[TreeNode]:
    """Recursively list a repository into a sorted, depth-bounded tree.

    Directories named in ``skip_dirs`` are dropped entirely. Directories at
    ``depth >= max_depth`` are kept with empty children. A failed listing
    degrades to an empty subtree.
    """
    max_depth = min(max_depth, MAX_TREE_DEPTH_CEILING)
    if depth > max_depth:
        return []

    try:
        contents = await client.get_contents(owner, repo, path)
    except Exception as e:
        logger.warning("⚠️  Tree listing failed for %s/%s:%s: %s", owner, repo, path or "/", e)
        return []

    items = contents if isinstance(contents, list) else [contents]
    nodes: List[TreeNode] = []
    for item in items:
        kind = "dir" if item.get("type") == "dir" else "file"
        name = item.get("name") or PurePosixPath(item.get("path", "")).name
        if kind == "dir" and name in skip_dirs:
            continue

        node = TreeNode(
            name=name,
            path=item.get("path") or name,
            kind=kind,
            size=item.get("size") or 0,
        )
        if kind == "dir" and depth < max_depth:
            node.children = await build_file_tree(
                client, owner, repo, node.path, depth + 1, max_depth, skip_dirs
            )
        nodes.append(node)

    return sorted(nodes, key=_sort_key)


def prune_file_tree(nodes: Iterable[TreeNode]) -> List[TreeNode]:
    """Return a copy of the tree without noise files (media, archives, lockfiles...)."""
    pruned: List[TreeNode] = []
    for node in nodes:
        if node.is_dir:
            if node.name in SKIP_DIRS:
                continue
            pruned.append(TreeNode(node.name, node.path, node.kind, node.size, prune_file_tree(node.children)))
            continue
        if node.name in SKIP_FILES or PurePosixPath(node.name).suffix.lower() in SKIP_EXTENSIONS:
            continue
        pruned.append(TreeNode(node.name, node.path, node.kind, node.size))
    return pruned


def tree_to_string(nodes: List[TreeNode], prefix: str = "") -> str:
    """Render the tree with box-drawing connectors, one entry per line."""
    lines: List[str] = []
    for i, node in enumerate(nodes):
        is_last = i == len(nodes) - 1
        lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{node.name}\n")
        if node.children:
            lines.append(tree_to_string(node.children, prefix + (SPACE if is_last else PIPE)))
    return "".join(lines)


def get_file_paths(nodes: Iterable[TreeNode], base_path: str = "") -> List[str]:
    """Depth-first list of full file paths; directories are not listed."""
    paths: List[str] = []
    for node in nodes:
        full_path = f"{base_path}/{node.name}" if base_path else node.name
        if node.is_dir:
            paths.extend(get_file_paths(node.children, full_path))
        else:
            paths.append(full_path)
    return paths


@dataclass(frozen=True)
class TreeLine:
    """One entry recovered from a rendered tree."""

    name: str
    depth: int
    path: str
    has_children: bool


def parse_tree_lines(rendering: str) -> List[TreeLine]:
    """Recover names, depths and paths from a ``tree_to_string`` rendering.

    Depth comes from the width of the continuation prefix (4 columns per
    level). An entry followed by a deeper entry is a directory.
    """
    raw: List[tuple[str, int]] = []
    for line in rendering.split("\n"):
        for marker in (BRANCH, LAST_BRANCH):
            idx = line.find(marker)
            if idx >= 0:
                name = line[idx + len(marker):]
                if name:
                    raw.append((name, idx // len(PIPE)))
                break

    entries: List[TreeLine] = []
    stack: List[str] = []
    for i, (name, depth) in enumerate(raw):
        del stack[depth:]
        path = "/".join([*stack, name])
        has_children = i + 1 < len(raw) and raw[i + 1][1] > depth
        entries.append(TreeLine(name=name, depth=depth, path=path, has_children=has_children))
        stack.append(name)
    return entries
