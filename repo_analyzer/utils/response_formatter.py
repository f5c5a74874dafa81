"""Utilities for normalizing LLM responses to plain text and JSON."""

from __future__ import annotations
from typing import Any
import json
import logging
import re

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?|\n?```", re.IGNORECASE)


def format_response(resp: object) -> str:
    """Normalize responses from various LLM return formats into a string.

    Accepts strings, message objects whose `content` is a string or a list of
    content blocks, dicts with `content`, and lists of any of those.
    """
    try:
        if isinstance(resp, str):
            return resp
        if isinstance(resp, dict):
            if "text" in resp and resp.get("type", "text") == "text":
                return str(resp["text"])
            if "content" in resp:
                return format_response(resp["content"])
            return ""
        if isinstance(resp, list):
            return "".join(format_response(item) for item in resp)
        if hasattr(resp, "content"):
            return format_response(getattr(resp, "content"))
        return str(resp)
    except Exception:
        logger.exception("Error formatting response")
        return str(resp)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence wrappers a model may put around JSON."""
    return _FENCE_RE.sub("", text).strip()


def parse_json_response(resp: object) -> Any:
    """Extract text from a model response and parse it as JSON.

    Raises:
        ValueError: if the text is not valid JSON (json.JSONDecodeError is a ValueError).
    """
    return json.loads(strip_code_fences(format_response(resp).strip()))
