"""Data models and collaborator contracts"""
from .models import (
    MAX_SELECTED_FILES,
    SEVERITIES,
    CompletionModel,
    ContextAssembly,
    FileRecord,
    Finding,
    IncludedFile,
    SelectionResult,
    SourceHost,
    StreamEvent,
    TreeNode,
)

__all__ = [
    "MAX_SELECTED_FILES",
    "SEVERITIES",
    "CompletionModel",
    "ContextAssembly",
    "FileRecord",
    "Finding",
    "IncludedFile",
    "SelectionResult",
    "SourceHost",
    "StreamEvent",
    "TreeNode",
]
