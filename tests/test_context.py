from repo_analyzer.context import (
    TRUNCATION_MARKER,
    build_context,
    check_context_fits,
    count_history_tokens,
    estimate_tokens,
    truncate_to_token_limit,
)
from repo_analyzer.models import FileRecord


def _three_files():
    # Each block is a little over 1000 estimated tokens.
    return [FileRecord(path=f"f{i}.js", content="x" * 4000) for i in range(3)]


def test_estimate_tokens_rounds_up():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


def test_history_tokens_include_per_message_overhead():
    history = [{"role": "user", "content": "abcd"}, {"role": "assistant", "content": ""}]
    assert count_history_tokens(history) == (1 + 4) + (0 + 4)
    assert count_history_tokens(None) == 0


def test_check_context_fits_reports_usage():
    result = check_context_fits("a" * 400, [{"role": "user", "content": "a" * 40}], limit=200)

    assert result["contextTokens"] == 100
    assert result["historyTokens"] == 14
    assert result["totalTokens"] == 114
    assert result["fits"] is True
    assert result["remaining"] == 86
    assert result["percentUsed"] == 57


def test_truncate_prefers_line_boundary():
    text = "\n".join("y" * 9 for _ in range(100))

    cut, truncated = truncate_to_token_limit(text, 50)

    assert truncated
    assert cut.endswith(TRUNCATION_MARKER)
    body = cut[: -len(TRUNCATION_MARKER)]
    assert len(body) <= 200
    assert not body.endswith("\n")
    assert all(len(line) == 9 for line in body.split("\n"))


def test_truncate_leaves_short_text_alone():
    assert truncate_to_token_limit("short", 10) == ("short", False)


def test_budget_too_small_for_third_file_skips_it():
    assembly = build_context(_three_files(), max_tokens=2500)

    assert [f.path for f in assembly.included] == ["f0.js", "f1.js"]
    assert not any(f.truncated for f in assembly.included)
    assert assembly.skipped == ("f2.js",)
    assert assembly.total_tokens <= 2500


def test_remaining_allowance_truncates_third_file():
    assembly = build_context(_three_files(), max_tokens=2700)

    assert [(f.path, f.truncated) for f in assembly.included] == [
        ("f0.js", False),
        ("f1.js", False),
        ("f2.js", True),
    ]
    assert assembly.skipped == ()
    assert TRUNCATION_MARKER in assembly.text
    assert assembly.total_tokens <= 2700


def test_files_after_the_budget_stop_are_skipped():
    files = _three_files() + [FileRecord(path="tiny.js", content="t")]

    assembly = build_context(files, max_tokens=2500)

    assert assembly.skipped == ("f2.js", "tiny.js")


def test_reserved_tokens_shrink_the_budget():
    assembly = build_context(_three_files(), max_tokens=2500, reserved_tokens=1000)

    assert [f.path for f in assembly.included] == ["f0.js"]


def test_records_without_content_are_ignored():
    files = [FileRecord(path="missing.js", error="not found"), FileRecord(path="a.js", content="abc")]

    assembly = build_context(files)

    assert [f.path for f in assembly.included] == ["a.js"]
    assert assembly.skipped == ()
    assert assembly.text == "\n--- FILE: a.js ---\nabc\n"


def test_build_context_is_deterministic():
    assert build_context(_three_files(), max_tokens=2700) == build_context(_three_files(), max_tokens=2700)


def test_custom_estimator_is_used():
    assembly = build_context([FileRecord(path="a.js", content="abc")], estimator=lambda text: 7)

    assert assembly.total_tokens == 7
