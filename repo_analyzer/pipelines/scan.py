import asyncio
import logging
from dataclasses import dataclass, field
from typing import List

from repo_analyzer.agents.security_agent import analyze_security
from repo_analyzer.github.fetcher import fetch_files_batch
from repo_analyzer.models import CompletionModel, SourceHost
from repo_analyzer.security import (
    filter_significant,
    generate_summary,
    group_by_severity,
    is_code_file,
    merge_findings,
    scan_files,
    sort_by_severity,
)
from repo_analyzer.streaming import EventChannel
from repo_analyzer.utils.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ScanRequest:
    owner: str
    repo: str
    file_paths: List[str] = field(default_factory=list)


async def run_scan(
    channel: EventChannel,
    request: ScanRequest,
    github: SourceHost,
    llm: CompletionModel,
    settings: Settings,
) -> None:
    """Fetch code files, run the rule table and the model review, report findings."""
    code_files = [p for p in request.file_paths if is_code_file(p)][: settings.max_scan_files]
    if not code_files:
        channel.error("No code files found to scan")
        return

    channel.status(f"Scanning {len(code_files)} files...", 10)

    async def on_batch(done: int, total: int) -> None:
        channel.status(f"Fetching files ({done}/{total})...", round(10 + (done / total) * 30))

    records = await fetch_files_batch(
        github,
        request.owner,
        request.repo,
        code_files,
        max_concurrent=settings.fetch_concurrency,
        on_batch=on_batch,
    )
    fetched = [r for r in records if r.ok]

    channel.status("Running pattern-based scan...", 40)
    model_task = asyncio.create_task(analyze_security(llm, fetched))
    try:
        pattern_findings = await asyncio.to_thread(scan_files, fetched)
        channel.status("Running AI analysis...", 60)
        model_result = await model_task
    finally:
        if not model_task.done():
            model_task.cancel()

    findings = sort_by_severity(filter_significant(merge_findings(pattern_findings, model_result.findings)))

    channel.status("Generating summary...", 90)
    payload = {
        "findings": [f.to_serializable() for f in findings],
        "grouped": {
            severity: [f.to_serializable() for f in items]
            for severity, items in group_by_severity(findings).items()
        },
        "summary": generate_summary(findings),
        "scannedFiles": len(code_files),
        "totalFindings": len(findings),
    }
    if model_result.error:
        payload["modelError"] = model_result.error
    channel.complete(payload)
