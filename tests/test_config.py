"""Environment settings -- parsing, fallbacks, derived configs."""

import logging

import pytest

from agent_engine.config import EngineSettings
from agent_engine.react import MarkerGrammar


def test_defaults_from_empty_environment():
    settings = EngineSettings.from_env({})
    assert settings == EngineSettings()
    assert settings.max_steps == 5
    assert settings.markers == "zh"
    assert settings.provider is None


def test_reads_every_variable():
    settings = EngineSettings.from_env({
        "AGENT_ENGINE_PROVIDER": "OpenAI",
        "AGENT_ENGINE_MODEL": "gpt-4o",
        "AGENT_ENGINE_MAX_STEPS": "8",
        "AGENT_ENGINE_MARKERS": "en",
        "AGENT_ENGINE_TOOL_CALLING": "text",
        "AGENT_ENGINE_CONCURRENT_ROUNDS": "false",
        "AGENT_ENGINE_REACT_TEMPERATURE": "0.2",
        "AGENT_ENGINE_ROLE_TEMPERATURE": "0.9",
        "AGENT_ENGINE_LOG_LEVEL": "debug",
    })
    assert settings.provider == "openai"
    assert settings.model == "gpt-4o"
    assert settings.max_steps == 8
    assert settings.grammar == MarkerGrammar.english()
    assert settings.tool_calling == "text"
    assert settings.concurrent_rounds is False
    assert settings.react_temperature == 0.2
    assert settings.role_temperature == 0.9
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name, value, attr, expected",
    [
        ("MAX_STEPS", "many", "max_steps", 5),
        ("MAX_STEPS", "0", "max_steps", 5),
        ("MARKERS", "klingon", "markers", "zh"),
        ("TOOL_CALLING", "psychic", "tool_calling", "auto"),
        ("CONCURRENT_ROUNDS", "maybe", "concurrent_rounds", True),
        ("REACT_TEMPERATURE", "warm", "react_temperature", 0.0),
        ("PROVIDER", "acme", "provider", None),
        ("LOG_LEVEL", "loud", "log_level", "INFO"),
    ],
)
def test_invalid_values_fall_back_with_warning(caplog, name, value, attr, expected):
    with caplog.at_level(logging.WARNING):
        settings = EngineSettings.from_env({f"AGENT_ENGINE_{name}": value})
    assert getattr(settings, attr) == expected
    assert "[Config]" in caplog.text


def test_blank_values_are_unset():
    settings = EngineSettings.from_env({"AGENT_ENGINE_MODEL": "  ", "AGENT_ENGINE_MAX_STEPS": ""})
    assert settings.model is None
    assert settings.max_steps == 5


def test_react_config():
    settings = EngineSettings(max_steps=3, markers="en", tool_calling="text", react_temperature=0.1)
    config = settings.react_config()
    assert config.max_steps == 3
    assert config.grammar == MarkerGrammar.english()
    assert config.tool_calling == "text"
    assert config.temperature == 0.1


def test_collaboration_config():
    config = EngineSettings(concurrent_rounds=False, role_temperature=0.7).collaboration_config()
    assert config.concurrent_rounds is False
    assert config.temperature == 0.7
    assert config.coordinator_role == "coordinator"


def test_cors_origins():
    default = EngineSettings.from_env({})
    assert default.cors_origins == ["http://localhost:3000", "http://localhost:8000", "http://localhost:8080"]
    settings = EngineSettings.from_env({"AGENT_ENGINE_CORS_ORIGINS": "https://a.test, https://b.test,"})
    assert settings.cors_origins == ["https://a.test", "https://b.test"]
