"""Pattern-based vulnerability scan and finding post-processing.

Rules are applied with ``Pattern.finditer`` on every call, so no scan
position survives between files or between scans.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence

from repo_analyzer.models import SEVERITIES, FileRecord, Finding
from repo_analyzer.security.rules import RULES, Rule, is_code_file

logger = logging.getLogger(__name__)

_SEVERITY_ORDER = {severity: rank for rank, severity in enumerate(SEVERITIES)}


def line_number_at(lines: Sequence[str], offset: int) -> int:
    """1-based line holding character ``offset`` (each line counts its newline)."""
    char_count = 0
    for i, line in enumerate(lines):
        char_count += len(line) + 1
        if char_count > offset:
            return i + 1
    return max(len(lines), 1)


def scan_file(path: str, content: str | None, rules: Sequence[Rule] = RULES) -> List[Finding]:
    """Run every rule over one file; non-code files produce nothing."""
    if not content or not is_code_file(path):
        return []

    lines = content.split("\n")
    findings: List[Finding] = []
    for rule in rules:
        for match in rule.pattern.finditer(content):
            line = line_number_at(lines, match.start())
            snippet = "\n".join(lines[max(0, line - 2):min(len(lines), line + 1)])
            findings.append(Finding(
                id=f"{rule.id}-{path}-{line}",
                file=path,
                line=line,
                type=rule.category,
                severity=rule.severity,
                title=rule.title,
                description=rule.description,
                remediation=rule.remediation,
                confidence="high",
                source="pattern",
                match=match.group(0)[:100],
                snippet=snippet,
            ))
    return findings


def scan_files(files: Iterable[FileRecord], rules: Sequence[Rule] = RULES) -> List[Finding]:
    findings: List[Finding] = []
    for record in files:
        if record.content is None:
            continue
        findings.extend(scan_file(record.path, record.content, rules))
    logger.info("🔐 Pattern scan produced %d findings", len(findings))
    return findings


def deduplicate_findings(findings: Iterable[Finding]) -> List[Finding]:
    """Keep the first finding for each (file, line, title)."""
    seen = set()
    unique: List[Finding] = []
    for finding in findings:
        if finding.key in seen:
            continue
        seen.add(finding.key)
        unique.append(finding)
    return unique


def merge_findings(pattern_findings: Iterable[Finding], model_findings: Iterable[Finding]) -> List[Finding]:
    """Pattern findings are listed first so they win identity ties."""
    return deduplicate_findings([*pattern_findings, *model_findings])


def filter_significant(findings: Iterable[Finding]) -> List[Finding]:
    """Keep critical/high findings and anything reported with high confidence."""
    return [f for f in findings if f.severity in ("critical", "high") or f.confidence == "high"]


def sort_by_severity(findings: Iterable[Finding]) -> List[Finding]:
    return sorted(findings, key=lambda f: _SEVERITY_ORDER.get(f.severity, len(SEVERITIES)))


def group_by_severity(findings: Iterable[Finding]) -> Dict[str, List[Finding]]:
    grouped: Dict[str, List[Finding]] = {severity: [] for severity in SEVERITIES}
    for finding in findings:
        grouped.setdefault(finding.severity, []).append(finding)
    return grouped


def generate_summary(findings: Sequence[Finding]) -> str:
    total = len(findings)
    if total == 0:
        return "No security vulnerabilities detected."
    grouped = group_by_severity(findings)
    parts = [f"{len(grouped[s])} {s}" for s in SEVERITIES if grouped[s]]
    return f"Found {total} potential issue{'s' if total != 1 else ''}: {', '.join(parts)}"
