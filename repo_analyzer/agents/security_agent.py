import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from repo_analyzer.agents.system_prompt import SECURITY_SYSTEM_PROMPT, build_security_prompt
from repo_analyzer.models import SEVERITIES, CompletionModel, FileRecord, Finding

logger = logging.getLogger(__name__)

MAX_REVIEW_FILES = 10
MAX_REVIEW_CHARS = 5000


@dataclass
class ModelScanResult:
    findings: List[Finding] = field(default_factory=list)
    error: Optional[str] = None


def _to_finding(raw: Any, index: int) -> Optional[Finding]:
    if not isinstance(raw, dict) or not raw.get("file") or not raw.get("title"):
        return None
    try:
        line = max(int(raw.get("line") or 1), 1)
    except (TypeError, ValueError):
        line = 1
    severity = str(raw.get("severity", "medium")).lower()
    if severity not in SEVERITIES:
        severity = "medium"
    file_path = str(raw["file"])
    return Finding(
        id=f"model-{file_path}-{line}-{index}",
        file=file_path,
        line=line,
        type=str(raw.get("type") or "Security Issue"),
        severity=severity,  # type: ignore[arg-type]
        title=str(raw["title"]),
        description=str(raw.get("description") or ""),
        remediation=str(raw.get("fix") or raw.get("remediation") or ""),
        confidence="medium",
        source="model",
    )


async def analyze_security(llm: CompletionModel, files: Iterable[FileRecord]) -> ModelScanResult:
    """Ask the model for issues beyond the pattern rules.

    A failed call or malformed reply yields no findings and an error note.
    """
    reviewed = [f for f in files if f.content][:MAX_REVIEW_FILES]
    if not reviewed:
        return ModelScanResult()

    blocks = "\n\n".join(f"--- {f.path} ---\n{f.content[:MAX_REVIEW_CHARS]}" for f in reviewed)
    try:
        parsed = await llm.complete_json(SECURITY_SYSTEM_PROMPT, build_security_prompt(blocks))
        raw_findings = parsed.get("findings") if isinstance(parsed, dict) else None
        if not isinstance(raw_findings, list):
            raise ValueError("Security reply has no 'findings' list")
    except Exception as e:
        logger.warning("⚠️  Model security analysis failed: %s", e)
        return ModelScanResult(error=f"Analysis failed: {e}")

    findings = [f for f in (_to_finding(raw, i) for i, raw in enumerate(raw_findings)) if f is not None]
    logger.info("🤖 Model review produced %d findings", len(findings))
    return ModelScanResult(findings=findings)
