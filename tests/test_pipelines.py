import pytest

from conftest import StubLLM
from repo_analyzer.pipelines import ChatRequest, ScanRequest, recent_history, run_chat, run_scan
from repo_analyzer.streaming import stream_events
from repo_analyzer.utils.settings import Settings

ALL_PATHS = ["README.md", "app.py", "src/index.js", "src/lib/util.js"]


async def _run(pipeline, request, host, llm, settings=None):
    settings = settings or Settings()

    async def producer(channel):
        await pipeline(channel, request=request, github=host, llm=llm, settings=settings)

    return [event async for event in stream_events(producer, timeout=5)]


def test_recent_history_keeps_window_and_maps_model_role():
    history = [{"role": "user", "content": str(i)} for i in range(12)] + [{"role": "model", "content": "m"}]

    window = recent_history(history, 3)

    assert window == [
        {"role": "user", "content": "10"},
        {"role": "user", "content": "11"},
        {"role": "assistant", "content": "m"},
    ]
    assert recent_history(history, 0) == []


@pytest.mark.asyncio
async def test_chat_streams_status_files_chunks_and_done(demo_host):
    llm = StubLLM(chunks=["Hello", " world"])
    request = ChatRequest(
        query="explain index.js",
        owner="octo",
        repo="demo",
        history=[{"role": "user", "content": "hi"}, {"role": "model", "content": "hello"}],
    )

    events = await _run(run_chat, request, demo_host, llm)

    assert [e.type for e in events] == ["status", "files", "status", "status", "chunk", "chunk", "status", "done"]
    assert [e.data["progress"] for e in events if e.type == "status"] == [10, 30, 60, 100]
    assert events[1].data["tier"] == "explicit"
    assert events[1].data["files"] == ["src/index.js"]
    assert "".join(e.data["content"] for e in events if e.type == "chunk") == "Hello world"

    context = events[-1].data["context"]
    assert context["includedFiles"] == [{"path": "src/index.js", "truncated": False}]
    assert context["totalTokens"] > 0
    assert events[-1].data["usage"]["fits"] is True
    assert events[-1].data["usage"]["historyTokens"] > 0

    messages = llm.streamed_messages[0]
    assert [m["role"] for m in messages] == ["system", "user", "user", "assistant", "user"]
    assert "--- FILE: src/index.js ---" in messages[1]["content"]
    assert messages[-1]["content"] == "explain index.js"


@pytest.mark.asyncio
async def test_chat_reuses_supplied_tree(demo_host):
    llm = StubLLM(replies=[{"files": ["README.md"], "reason": "docs"}])
    request = ChatRequest(query="what is this?", owner="octo", repo="demo", tree="└── README.md\n")

    events = await _run(run_chat, request, demo_host, llm)

    assert "" not in demo_host.calls
    assert events[1].data["tier"] == "model"
    assert events[-1].type == "done"


@pytest.mark.asyncio
async def test_chat_model_failure_still_produces_an_answer(demo_host):
    llm = StubLLM(replies=[RuntimeError("selection down")])
    request = ChatRequest(query="what is this?", owner="octo", repo="demo", tree="└── README.md\n")

    events = await _run(run_chat, request, demo_host, llm)

    assert events[1].data["tier"] == "fallback"
    assert events[-1].type == "done"
    included = [f["path"] for f in events[-1].data["context"]["includedFiles"]]
    assert included == ["README.md", "src/index.js"]


@pytest.mark.asyncio
async def test_scan_reports_pattern_findings(demo_host):
    llm = StubLLM(replies=[{"findings": []}])

    events = await _run(run_scan, ScanRequest("octo", "demo", ALL_PATHS), demo_host, llm)

    assert [e.type for e in events] == ["status"] * 5 + ["complete"]
    assert events[0].data["message"] == "Scanning 3 files..."
    assert events[1].data == {"message": "Fetching files (3/3)...", "progress": 40}

    result = events[-1].data
    assert result["scannedFiles"] == 3
    assert result["totalFindings"] == 2
    assert result["summary"] == "Found 2 potential issues: 2 critical"
    assert [(f["file"], f["line"]) for f in result["findings"]] == [("app.py", 3), ("src/index.js", 1)]
    assert len(result["grouped"]["critical"]) == 2
    assert "modelError" not in result


@pytest.mark.asyncio
async def test_scan_model_failure_is_noted(demo_host):
    llm = StubLLM(replies=[RuntimeError("quota exceeded")])

    events = await _run(run_scan, ScanRequest("octo", "demo", ALL_PATHS), demo_host, llm)

    result = events[-1].data
    assert result["modelError"] == "Analysis failed: quota exceeded"
    assert result["totalFindings"] == 2


@pytest.mark.asyncio
async def test_scan_respects_file_limit(demo_host):
    llm = StubLLM(replies=[{"findings": []}])

    events = await _run(run_scan, ScanRequest("octo", "demo", ALL_PATHS), demo_host, llm, Settings(max_scan_files=1))

    assert events[-1].data["scannedFiles"] == 1


@pytest.mark.asyncio
async def test_scan_without_code_files_errors(demo_host):
    events = await _run(run_scan, ScanRequest("octo", "demo", ["README.md"]), demo_host, StubLLM())

    assert [(e.type, e.data) for e in events] == [("error", {"message": "No code files found to scan"})]
