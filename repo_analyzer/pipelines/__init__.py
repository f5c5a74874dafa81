"""Streaming producers for the chat and scan requests"""
from .chat import ChatRequest, recent_history, run_chat
from .scan import ScanRequest, run_scan

__all__ = ["ChatRequest", "ScanRequest", "recent_history", "run_chat", "run_scan"]
