import pytest

from repo_analyzer.utils.settings import Settings


def test_defaults_without_environment(monkeypatch):
    for name in ("GITHUB_TOKEN", "LLM_MODEL", "MAX_TREE_DEPTH", "FETCH_CONCURRENCY", "CORS_ORIGINS", "PIPELINE_TIMEOUT",
                 "CONTEXT_TOKEN_BUDGET"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.github_token is None
    assert settings.model_name == "gpt-4o-mini"
    assert settings.max_tree_depth == 4
    assert settings.fetch_concurrency == 5
    assert settings.context_token_budget == 80_000
    assert settings.pipeline_timeout == 60.0
    assert settings.cors_origins == ("*",)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "abc")
    monkeypatch.setenv("GITHUB_API_BASE", "https://ghe.example.com/api/v3/")
    monkeypatch.setenv("FETCH_CONCURRENCY", "2")
    monkeypatch.setenv("PIPELINE_TIMEOUT", "12.5")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    settings = Settings.from_env()

    assert settings.github_token == "abc"
    assert settings.github_api_base == "https://ghe.example.com/api/v3"
    assert settings.fetch_concurrency == 2
    assert settings.pipeline_timeout == 12.5
    assert settings.cors_origins == ("http://a.test", "http://b.test")


def test_tree_depth_is_clamped(monkeypatch):
    monkeypatch.setenv("MAX_TREE_DEPTH", "9")

    assert Settings.from_env().max_tree_depth == 5


def test_invalid_values_are_rejected(monkeypatch):
    monkeypatch.setenv("MAX_SCAN_FILES", "many")
    with pytest.raises(ValueError, match="MAX_SCAN_FILES"):
        Settings.from_env()

    with pytest.raises(ValueError):
        Settings(fetch_concurrency=0)
