from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator


CONFIG_PATH_ENV = "CLEAN_SHEETS_CONFIG"


class LLMConfig(BaseModel):
    """Settings for the upstream chat-completion provider."""

    model: str = Field(
        "openai/gpt-4o-mini",
        description="LLM model identifier sent to the provider",
    )
    temperature: float = Field(
        0.1,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    max_output_tokens: int = Field(
        4000,
        gt=0,
        description="Maximum number of tokens returned by the provider",
    )
    api_key: str | None = Field(
        None,
        description="Explicit API key; if omitted the key is read from api_key_env",
    )
    api_key_env: str | None = Field(
        "OPENROUTER_API_KEY",
        description="Environment variable with the API key",
    )
    base_url: str = Field(
        "https://openrouter.ai/api/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    http_referer: str | None = Field(
        "https://sheets.google.com",
        description="HTTP Referer header sent for OpenRouter app attribution",
    )
    x_title: str | None = Field(
        "Clean Sheets AI",
        description="X-Title header sent for OpenRouter app attribution",
    )
    request_timeout: float | None = Field(
        None,
        gt=0,
        description="Optional timeout in seconds for the upstream request",
    )

    @model_validator(mode="after")
    def _ensure_key_source(self) -> "LLMConfig":
        if not self.api_key and not self.api_key_env:
            raise ValueError("LLM config must define 'api_key' or 'api_key_env'")
        return self

    def resolve_api_key(self) -> str | None:
        """Return the API key, reading the environment at call time."""

        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.environ.get(self.api_key_env) or None
        return None


class AnalysisConfig(BaseModel):
    max_cells: int = Field(
        200,
        gt=0,
        description="Number of cells included in the prompt; the rest are dropped",
    )
    confidence_threshold: float = Field(
        0.7,
        ge=0.0,
        le=1.0,
        description="Issues with confidence at or below this value are discarded",
    )


class AppConfig(BaseModel):
    llm: LLMConfig = Field(default_factory=LLMConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    cors_allow_origin: str = Field(
        "*",
        description="Value of the Access-Control-Allow-Origin response header",
    )


def load_config(path: str | Path) -> AppConfig:
    """Load configuration from a YAML file and return a validated object."""

    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if data is None:
        msg = f"Configuration file is empty: {config_path}"
        raise ValueError(msg)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def config_from_env() -> AppConfig:
    """Load the file named by CLEAN_SHEETS_CONFIG, or fall back to defaults."""

    path = os.environ.get(CONFIG_PATH_ENV)
    if path:
        return load_config(path)
    return AppConfig()
