"""Source-hosting access: client → tree → batched file fetch"""
from .client import GitHubClient, GitHubError, NotFoundError
from .fetcher import fetch_file_content, fetch_files_batch
from .repository import InvalidInputError, fetch_repo_data, fetch_user_profile, parse_github_input
from .tree import build_file_tree, get_file_paths, parse_tree_lines, prune_file_tree, tree_to_string

__all__ = [
    "GitHubClient",
    "GitHubError",
    "NotFoundError",
    "InvalidInputError",
    "build_file_tree",
    "fetch_file_content",
    "fetch_files_batch",
    "fetch_repo_data",
    "fetch_user_profile",
    "get_file_paths",
    "parse_github_input",
    "parse_tree_lines",
    "prune_file_tree",
    "tree_to_string",
]
