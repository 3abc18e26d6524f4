"""
config/settings.py — AxonerAI Runtime Settings

Merges config.yaml (defaults/structure) with .env (secrets).
Pydantic-powered: all fields are validated and typed.

  - Field validators reject bad values at parse time (unknown provider,
    iteration bound < 1, search_results outside 1–10, unknown log level)
  - validate_all() performs cross-field startup validation and raises
    ConfigError with a numbered list of every problem found
  - PROVIDER_TYPE in the environment overrides llm.provider
  - load_settings() respects AXONERAI_CONFIG env var as a fallback
    when no explicit config_path argument is given
"""

from __future__ import annotations

import os
import threading as _threading
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────

class ConfigError(Exception):
    """Raised by validate_all() when one or more config problems are found."""


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

_VALID_PROVIDERS  = {"anthropic", "openai", "groq"}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. You have several tools at your disposal. "
    "Do not give information without proper usage of tools: you are smart, "
    "but you rely on tools for information."
)


# ─────────────────────────────────────────────────────────────────────────────
# Sub-models
# ─────────────────────────────────────────────────────────────────────────────

class AgentConfig(BaseModel):
    name: str = "AxonerAI"
    max_iterations: int = 10
    system_prompt: Optional[str] = DEFAULT_SYSTEM_PROMPT
    strict_protocol: bool = False

    @field_validator("max_iterations")
    @classmethod
    def _positive_iterations(cls, v: int) -> int:
        if v < 1:
            raise ValueError("agent.max_iterations must be >= 1")
        return v


class LLMConfig(BaseModel):
    provider: str = "groq"
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    timeout_seconds: float = 60.0
    base_url: Optional[str] = None

    @field_validator("provider")
    @classmethod
    def _known_provider(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in _VALID_PROVIDERS:
            raise ValueError(
                f"llm.provider '{v}' is not supported. "
                f"Supported: {sorted(_VALID_PROVIDERS)}"
            )
        return v

    @field_validator("max_tokens")
    @classmethod
    def _positive_tokens(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("llm.max_tokens must be >= 1")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("llm.timeout_seconds must be > 0")
        return v


class ToolsConfig(BaseModel):
    timeout_seconds: float = 30.0
    max_result_chars: int = 8000
    max_concurrency: int = 1
    allow_overwrite: bool = True
    search_results: int = 3

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("tools.timeout_seconds must be > 0")
        return v

    @field_validator("max_result_chars", "max_concurrency")
    @classmethod
    def _positive_int(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"tools.{info.field_name} must be >= 1")
        return v

    @field_validator("search_results")
    @classmethod
    def _search_results_range(cls, v: int) -> int:
        if not (1 <= v <= 10):
            raise ValueError("tools.search_results must be between 1 and 10")
        return v


class SessionsConfig(BaseModel):
    base_dir: str = "./data/sessions"
    enabled: bool = True


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_dir: str = "./data/logs"
    max_file_size_mb: int = 100
    backup_count: int = 5
    console_output: bool = False
    json_format: bool = True

    @field_validator("level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"logging.level '{v}' is not valid. "
                f"Must be one of: {sorted(_VALID_LOG_LEVELS)}"
            )
        return upper


# ─────────────────────────────────────────────────────────────────────────────
# Root Settings
# ─────────────────────────────────────────────────────────────────────────────

_KEY_ENV_NAMES = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai":    "OPENAI_API_KEY",
    "groq":      "GROQ_API_KEY",
}


class Settings(BaseSettings):
    """
    AxonerAI runtime settings.

    Priority (highest to lowest):
      1. config.yaml sections passed by load_settings()
      2. Environment variables
      3. .env file
      4. Field defaults

    Secrets are only ever read from the environment / .env.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    # -- Secrets from .env ---------------------------------------------------
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    groq_api_key: Optional[str] = Field(default=None, alias="GROQ_API_KEY")
    search_api_key: Optional[str] = Field(default=None, alias="SEARCH_API_KEY")
    cx_engine: Optional[str] = Field(default=None, alias="CX_ENGINE")
    provider_type: Optional[str] = Field(default=None, alias="PROVIDER_TYPE")

    # -- Structured config (from config.yaml) --------------------------------
    agent: AgentConfig = Field(default_factory=AgentConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    sessions: SessionsConfig = Field(default_factory=SessionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("provider_type", mode="before")
    @classmethod
    def _blank_provider_type(cls, v: Any) -> Optional[str]:
        if v in (None, "", "null"):
            return None
        return str(v).lower().strip()

    # -- Convenience properties ----------------------------------------------

    @property
    def active_provider(self) -> str:
        """PROVIDER_TYPE when set, else llm.provider."""
        return self.provider_type or self.llm.provider

    def api_key_for(self, provider: str) -> Optional[str]:
        return {
            "anthropic": self.anthropic_api_key,
            "openai":    self.openai_api_key,
            "groq":      self.groq_api_key,
        }.get(provider.lower())

    @property
    def agent_name(self) -> str:
        return self.agent.name

    @property
    def log_level(self) -> str:
        return self.logging.level.upper()

    @property
    def log_dir(self) -> Path:
        return Path(self.logging.log_dir)

    @property
    def sessions_dir(self) -> Path:
        return Path(self.sessions.base_dir)

    def validate_all(self) -> None:
        """
        Full startup validation. Raises ConfigError listing every problem found.

        Called once at startup in main.py before any subsystem initialises.
        Pydantic field validators catch type/value errors at parse time; this
        method catches cross-field problems Pydantic can't see (an unknown
        PROVIDER_TYPE, the API key for the chosen provider).
        """
        errors: list[str] = []

        # ── Provider is known ────────────────────────────────────────────────
        provider = self.active_provider
        if provider not in _VALID_PROVIDERS:
            errors.append(
                f"PROVIDER_TYPE '{provider}' is not supported. "
                f"Supported: {sorted(_VALID_PROVIDERS)}"
            )

        # ── LLM provider API key ─────────────────────────────────────────────
        elif not self.api_key_for(provider):
            errors.append(
                f"LLM provider '{provider}' requires {_KEY_ENV_NAMES[provider]} "
                f"to be set in your environment or .env file."
            )

        # ── Search credentials come as a pair ────────────────────────────────
        if bool(self.search_api_key) != bool(self.cx_engine):
            errors.append(
                "web_search needs both SEARCH_API_KEY and CX_ENGINE; "
                "only one of them is set."
            )

        # ── Report all errors together ───────────────────────────────────────
        if errors:
            numbered = "\n".join(f"  {i+1}. {e}" for i, e in enumerate(errors))
            raise ConfigError(
                f"\n\nAxonerAI startup failed — {len(errors)} configuration "
                f"problem(s) found:\n\n{numbered}\n\n"
                f"Fix the issues above in config/config.yaml or your .env file "
                f"and restart.\n"
            )


# ─────────────────────────────────────────────────────────────────────────────
# Loader + singleton
# ─────────────────────────────────────────────────────────────────────────────

_singleton: Optional[Settings] = None
_singleton_lock = _threading.Lock()

_KNOWN_SECTIONS = {"agent", "llm", "tools", "sessions", "logging"}

# Resolved from the module so an installed package still finds its config
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _resolve_config_path(config_path: str | Path | None) -> Path:
    """
    Resolve the config file path with this priority:
      1. Explicit config_path argument (from --config CLI flag)
      2. AXONERAI_CONFIG environment variable
      3. Default: the config.yaml shipped beside this module
    """
    if config_path is not None:
        return Path(config_path)
    env_path = os.environ.get("AXONERAI_CONFIG")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings by merging config.yaml with environment variables."""
    global _singleton
    yaml_data = _load_yaml(_resolve_config_path(config_path))
    init_kwargs = {k: v for k, v in yaml_data.items() if k in _KNOWN_SECTIONS}

    instance = Settings(**init_kwargs)
    with _singleton_lock:
        _singleton = instance
    return instance


def get_settings() -> Settings:
    """
    Return the global Settings singleton, loading it from the default
    config path on first use.
    """
    global _singleton
    if _singleton is not None:
        return _singleton
    with _singleton_lock:
        if _singleton is None:
            _singleton = Settings(**{
                k: v for k, v in _load_yaml(_resolve_config_path(None)).items()
                if k in _KNOWN_SECTIONS
            })
        return _singleton
