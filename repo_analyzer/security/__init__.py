"""Rule-based security scanning"""
from .rules import CODE_EXTENSIONS, RULES, Rule, is_code_file
from .scanner import (
    deduplicate_findings,
    filter_significant,
    generate_summary,
    group_by_severity,
    line_number_at,
    merge_findings,
    scan_file,
    scan_files,
    sort_by_severity,
)

__all__ = [
    "CODE_EXTENSIONS",
    "RULES",
    "Rule",
    "deduplicate_findings",
    "filter_significant",
    "generate_summary",
    "group_by_severity",
    "is_code_file",
    "line_number_at",
    "merge_findings",
    "scan_file",
    "scan_files",
    "sort_by_severity",
]
