"""Shared helpers: settings and model response normalisation"""
from .response_formatter import format_response, parse_json_response, strip_code_fences
from .settings import Settings

__all__ = ["Settings", "format_response", "parse_json_response", "strip_code_fences"]
