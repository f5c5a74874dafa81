"""
Repository Analyzer - library core

This is a pure library module with NO CLI or server code.
Import this in your CLI, server, or any other application.

Usage:
    from repo_analyzer import RepoAnalyzer

    # initialize() and fetch() are async; chat() and scan() return async event iterators
    # analyzer = await RepoAnalyzer().initialize()
"""

from repo_analyzer.api import RepoAnalyzer, RequestTimeoutError

__all__ = ["RepoAnalyzer", "RequestTimeoutError"]
