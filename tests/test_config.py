"""
Tests for configuration loading
"""
import pytest

from clean_sheets.config import AppConfig, LLMConfig, config_from_env, load_config


def test_defaults():
    config = AppConfig()

    assert config.llm.model == "openai/gpt-4o-mini"
    assert config.llm.temperature == 0.1
    assert config.llm.max_output_tokens == 4000
    assert config.llm.api_key_env == "OPENROUTER_API_KEY"
    assert config.analysis.max_cells == 200
    assert config.analysis.confidence_threshold == 0.7


def test_api_key_read_at_call_time(monkeypatch):
    conf = LLMConfig()
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    assert conf.resolve_api_key() is None

    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-123")
    assert conf.resolve_api_key() == "sk-or-123"


def test_explicit_api_key_wins(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "from-env")

    assert LLMConfig(api_key="explicit").resolve_api_key() == "explicit"


def test_empty_env_value_counts_as_missing(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "")

    assert LLMConfig().resolve_api_key() is None


def test_key_source_required():
    with pytest.raises(ValueError):
        LLMConfig(api_key=None, api_key_env=None)


def test_load_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "llm:\n  model: openai/gpt-4o\n  api_key_env: MY_KEY\nanalysis:\n  max_cells: 50\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.llm.model == "openai/gpt-4o"
    assert config.llm.api_key_env == "MY_KEY"
    assert config.analysis.max_cells == 50
    assert config.analysis.confidence_threshold == 0.7


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_load_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ValueError, match="empty"):
        load_config(path)


def test_load_invalid_values(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("analysis:\n  confidence_threshold: 1.5\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path)


def test_config_from_env(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("cors_allow_origin: https://docs.google.com\n", encoding="utf-8")

    monkeypatch.delenv("CLEAN_SHEETS_CONFIG", raising=False)
    assert config_from_env().cors_allow_origin == "*"

    monkeypatch.setenv("CLEAN_SHEETS_CONFIG", str(path))
    assert config_from_env().cors_allow_origin == "https://docs.google.com"
