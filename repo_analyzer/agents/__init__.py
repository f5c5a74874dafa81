"""Language-model collaborators: chat model handle, file selection, security review"""
from .llm import LanguageModel, to_langchain_messages
from .security_agent import ModelScanResult, analyze_security
from .selector import DEFAULT_FILES, find_mentioned_files, select_relevant_files
from .system_prompt import SYSTEM_PROMPT

__all__ = [
    "DEFAULT_FILES",
    "LanguageModel",
    "ModelScanResult",
    "SYSTEM_PROMPT",
    "analyze_security",
    "find_mentioned_files",
    "select_relevant_files",
    "to_langchain_messages",
]
