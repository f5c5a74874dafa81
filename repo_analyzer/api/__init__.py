"""
Core API for the Repository Analyzer.

This package provides a clean, interface-agnostic API that can be used
by CLI, web servers, UI applications, or any other interface.
"""
from .repo_analyzer import RepoAnalyzer, RequestTimeoutError

__all__ = ["RepoAnalyzer", "RequestTimeoutError"]
