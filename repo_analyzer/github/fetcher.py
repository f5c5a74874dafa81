import asyncio
import base64
import binascii
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from repo_analyzer.models import FileRecord, SourceHost

logger = logging.getLogger(__name__)

# Called before each chunk starts with (paths done once the chunk finishes, total paths).
BatchCallback = Callable[[int, int], Optional[Awaitable[None]]]


async def fetch_file_content(client: SourceHost, owner: str, repo: str, path: str) -> FileRecord:
    """Fetch and decode one file. Never raises; failures are recorded on the record."""
    try:
        data = await client.get_contents(owner, repo, path)
        if not isinstance(data, dict) or data.get("type") != "file":
            return FileRecord(path=path, error="not a file")

        size = data.get("size") or 0
        raw = data.get("content")
        if raw is None or data.get("encoding") == "none":
            return FileRecord(path=path, size=size, error="content not available")
        content = base64.b64decode(raw).decode("utf-8", errors="replace")
        return FileRecord(path=path, content=content, size=size)
    except (binascii.Error, ValueError) as e:
        logger.warning("⚠️  Could not decode %s: %s", path, e)
        return FileRecord(path=path, error=f"decode failed: {e}")
    except Exception as e:
        logger.warning("⚠️  Fetch failed for %s: %s", path, e)
        return FileRecord(path=path, error=str(e) or e.__class__.__name__)


async def fetch_files_batch(
    client: SourceHost,
    owner: str,
    repo: str,
    paths: Sequence[str],
    max_concurrent: int = 5,
    on_batch: Optional[BatchCallback] = None,
) -> List[FileRecord]:
    """Fetch files in consecutive chunks of ``max_concurrent``.

    Requests inside a chunk run concurrently; the next chunk starts only after
    the whole previous chunk has finished. Output order matches ``paths``.
    """
    if max_concurrent < 1:
        raise ValueError("max_concurrent must be at least 1")

    results: List[FileRecord] = []
    for start in range(0, len(paths), max_concurrent):
        chunk = paths[start:start + max_concurrent]
        if on_batch is not None:
            maybe = on_batch(start + len(chunk), len(paths))
            if maybe is not None:
                await maybe
        chunk_results = await asyncio.gather(
            *(fetch_file_content(client, owner, repo, path) for path in chunk)
        )
        results.extend(chunk_results)

    failed = sum(1 for r in results if not r.ok)
    logger.info("📄 Fetched %d files (%d failed)", len(results) - failed, failed)
    return results
