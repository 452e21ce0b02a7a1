"""
Engine settings loaded from the environment.

All settings are optional. Invalid values fall back to the default with a
warning. Provider API keys are read by the LLM client itself
(ANTHROPIC_API_KEY, OPENAI_API_KEY, GOOGLE_API_KEY).

  AGENT_ENGINE_PROVIDER            anthropic | openai | google (auto-detect if unset)
  AGENT_ENGINE_MODEL               provider model name
  AGENT_ENGINE_MAX_STEPS           ReAct step budget (default 5)
  AGENT_ENGINE_MARKERS             zh | en (default zh)
  AGENT_ENGINE_TOOL_CALLING        auto | text | native (default auto)
  AGENT_ENGINE_CONCURRENT_ROUNDS   true | false (default true)
  AGENT_ENGINE_REACT_TEMPERATURE   default 0.0
  AGENT_ENGINE_ROLE_TEMPERATURE    default 0.5
  AGENT_ENGINE_LOG_LEVEL           DEBUG | INFO | WARNING | ERROR | CRITICAL (default INFO)
  AGENT_ENGINE_SEARCH_URL          HTTP search endpoint (placeholder search if unset)
  AGENT_ENGINE_SEARCH_API_KEY      bearer token for the search endpoint
  AGENT_ENGINE_SEARCH_TIMEOUT      seconds (default 10)
  AGENT_ENGINE_CORS_ORIGINS        comma-separated origins for the HTTP API (default: localhost)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

from .orchestration.coordinator import CollaborationConfig
from .react.engine import DEFAULT_MAX_STEPS, TOOL_CALLING_MODES, ReActConfig
from .react.parser import MarkerGrammar
from .tools.http_search import DEFAULT_TIMEOUT as DEFAULT_SEARCH_TIMEOUT

logger = logging.getLogger(__name__)

ENV_PREFIX = "AGENT_ENGINE_"
PROVIDERS = ("anthropic", "openai", "google")
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}
LOCAL_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:8000",
    "http://localhost:8080",
)
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class EngineSettings:
    """Process-level settings for both agent modes."""

    provider: str | None = None
    model: str | None = None
    max_steps: int = DEFAULT_MAX_STEPS
    markers: str = "zh"
    tool_calling: str = "auto"
    concurrent_rounds: bool = True
    react_temperature: float = 0.0
    role_temperature: float = 0.5
    log_level: str = "INFO"
    search_url: str | None = None
    search_api_key: str | None = None
    search_timeout: float = DEFAULT_SEARCH_TIMEOUT
    cors_origins: list[str] = field(default_factory=lambda: list(LOCAL_ORIGINS))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineSettings":
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            return value.strip() if value and value.strip() else None

        provider = get("PROVIDER")
        if provider and provider.lower() not in PROVIDERS:
            logger.warning(f"[Config] Unknown provider '{provider}', auto-detecting")
            provider = None

        markers = (get("MARKERS") or defaults.markers).lower()
        try:
            MarkerGrammar.named(markers)
        except ValueError:
            logger.warning(f"[Config] Unknown marker grammar '{markers}', using zh")
            markers = defaults.markers

        tool_calling = (get("TOOL_CALLING") or defaults.tool_calling).lower()
        if tool_calling not in TOOL_CALLING_MODES:
            logger.warning(f"[Config] Unknown tool calling mode '{tool_calling}', using auto")
            tool_calling = defaults.tool_calling

        log_level = (get("LOG_LEVEL") or defaults.log_level).upper()
        if log_level not in LOG_LEVELS:
            logger.warning(f"[Config] Unknown log level '{log_level}', using INFO")
            log_level = defaults.log_level

        return cls(
            provider=provider.lower() if provider else None,
            model=get("MODEL"),
            max_steps=_parse_int(get("MAX_STEPS"), defaults.max_steps, "MAX_STEPS", minimum=1),
            markers=markers,
            tool_calling=tool_calling,
            concurrent_rounds=_parse_bool(
                get("CONCURRENT_ROUNDS"), defaults.concurrent_rounds, "CONCURRENT_ROUNDS"
            ),
            react_temperature=_parse_float(
                get("REACT_TEMPERATURE"), defaults.react_temperature, "REACT_TEMPERATURE"
            ),
            role_temperature=_parse_float(
                get("ROLE_TEMPERATURE"), defaults.role_temperature, "ROLE_TEMPERATURE"
            ),
            log_level=log_level,
            search_url=get("SEARCH_URL"),
            search_api_key=get("SEARCH_API_KEY"),
            search_timeout=_parse_float(
                get("SEARCH_TIMEOUT"), defaults.search_timeout, "SEARCH_TIMEOUT"
            ),
            cors_origins=_parse_list(get("CORS_ORIGINS")) or defaults.cors_origins,
        )

    @property
    def grammar(self) -> MarkerGrammar:
        return MarkerGrammar.named(self.markers)

    def react_config(self) -> ReActConfig:
        return ReActConfig(
            max_steps=self.max_steps,
            temperature=self.react_temperature,
            grammar=self.grammar,
            tool_calling=self.tool_calling,
        )

    def collaboration_config(self) -> CollaborationConfig:
        return CollaborationConfig(
            concurrent_rounds=self.concurrent_rounds,
            temperature=self.role_temperature,
        )


def _parse_int(raw: str | None, default: int, name: str, minimum: int = 0) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"[Config] {ENV_PREFIX}{name}={raw!r} is not an integer, using {default}")
        return default
    if value < minimum:
        logger.warning(f"[Config] {ENV_PREFIX}{name} must be >= {minimum}, using {default}")
        return default
    return value


def _parse_float(raw: str | None, default: float, name: str) -> float:
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[Config] {ENV_PREFIX}{name}={raw!r} is not a number, using {default}")
        return default


def _parse_bool(raw: str | None, default: bool, name: str) -> bool:
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    logger.warning(f"[Config] {ENV_PREFIX}{name}={raw!r} is not a boolean, using {default}")
    return default


def _parse_list(raw: str | None) -> list[str]:
    if raw is None:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]
