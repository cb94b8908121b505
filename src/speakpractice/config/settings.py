"""Service settings and sub-configurations.

This module defines the complete configuration structure for the service
using Pydantic V2 for validation and type safety. Settings load from a
YAML file or from environment variables (with ``.env`` support).
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

PLACEHOLDER_API_KEY = "your_openai_api_key_here"

DEFAULT_REASONING_MODEL_PREFIXES = ("o1", "o3", "o4", "gpt-5")


class WhisperConfig(BaseModel):
    """Configuration for speech-to-text.

    Attributes:
        model: Transcription model identifier.
        language: Default spoken language (ISO-639-1).
        response_format: Default response format.
        temperature: Default sampling temperature.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    model: str = Field(default="whisper-1", description="Transcription model")
    language: str = Field(default="en", description="Default spoken language")
    response_format: Literal["json", "text", "srt", "verbose_json", "vtt"] = Field(
        default="json",
        description="Default transcription response format",
    )
    temperature: float = Field(default=0.2, ge=0.0, le=1.0)


class GPTConfig(BaseModel):
    """Configuration for text generation.

    Attributes:
        model: Default generation model identifier.
        temperature: Default sampling temperature for non-reasoning models.
        max_output_tokens: Default generation length limit.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    model: str = Field(default="gpt-5-nano-2025-08-07", description="Default model")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=2000, ge=1, le=128000)


class NamedPromptConfig(BaseModel):
    """Reference to a provider-side stored prompt.

    Attributes:
        id: Stored prompt identifier.
        version: Stored prompt version.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    id: str = Field(default="", description="Stored prompt identifier")
    version: str = Field(default="1", description="Stored prompt version")


class OpenAIConfig(BaseModel):
    """Configuration for the OpenAI provider.

    Attributes:
        api_key: Provider API key.
        organization: Optional organization identifier.
        timeout_s: Request timeout applied to every provider call.
        whisper: Speech-to-text defaults.
        gpt: Text generation defaults.
        topic_prompt: Stored prompt used for topic conversations.
        reasoning_model_prefixes: Model name prefixes that reject sampling
            parameters.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    api_key: str = Field(default="", description="Provider API key")
    organization: str | None = Field(None, description="Organization identifier")
    timeout_s: float = Field(default=60.0, gt=0.0, le=600.0)
    whisper: WhisperConfig = Field(default_factory=WhisperConfig)
    gpt: GPTConfig = Field(default_factory=GPTConfig)
    topic_prompt: NamedPromptConfig = Field(default_factory=NamedPromptConfig)
    reasoning_model_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REASONING_MODEL_PREFIXES),
        description="Model prefixes that reject temperature and top_p",
    )


class ServerConfig(BaseModel):
    """Configuration for the HTTP server.

    Attributes:
        environment: Deployment environment.
        host: Bind address.
        port: Bind port.
        api_prefix: Prefix for every API route.
        cors_origins: Origins allowed by CORS.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    environment: Literal["development", "production", "test"] = "development"
    host: str = "0.0.0.0"
    port: int = Field(default=3001, ge=1, le=65535)
    api_prefix: str = Field(default="/api", description="Route prefix")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    @field_validator("api_prefix")
    @classmethod
    def prefix_starts_with_slash(cls, v: str) -> str:
        """Normalize the prefix to ``/name`` without a trailing slash.

        Raises:
            ValueError: If the prefix does not start with "/".
        """
        if not v.startswith("/"):
            raise ValueError("api_prefix must start with '/'")
        return v.rstrip("/") or "/"


class RateLimitConfig(BaseModel):
    """Configuration for per-client request counting.

    Attributes:
        window_s: Global window length in seconds.
        max_requests: Requests allowed per client in the global window.
        upload_window_s: Window for audio uploads.
        upload_max_requests: Uploads allowed per client in the upload window.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    enabled: bool = True
    window_s: float = Field(default=900.0, gt=0.0)
    max_requests: int = Field(default=100, ge=1)
    upload_window_s: float = Field(default=60.0, gt=0.0)
    upload_max_requests: int = Field(default=10, ge=1)


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    model_config = ConfigDict(strict=True, extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["standard", "json"] = "standard"


class AppSettings(BaseModel):
    """Complete service configuration.

    This is the root configuration model that aggregates all
    sub-configurations. It is built once at startup and only read
    afterwards.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "AppSettings":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            Validated AppSettings instance.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigError: If YAML is invalid or validation fails.
        """
        from speakpractice.exceptions import ConfigError

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            return cls.model_validate(data)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {e}") from e
        except Exception as e:
            raise ConfigError(f"Configuration validation failed: {e}") from e

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "AppSettings":
        """Load configuration from environment variables.

        A ``.env`` file is read first when present; variables already set
        in the process environment win.

        Args:
            env_file: Optional explicit ``.env`` path.

        Returns:
            Validated AppSettings instance.

        Raises:
            ConfigError: If a variable has an invalid value.
        """
        from speakpractice.exceptions import ConfigError

        load_dotenv(env_file)

        def _env(name: str, default: str | None = None) -> str | None:
            value = os.getenv(name)
            return value if value not in (None, "") else default

        try:
            openai_data: dict[str, Any] = {
                "api_key": _env("OPENAI_API_KEY", ""),
                "organization": _env("OPENAI_ORG_ID"),
                "timeout_s": float(_env("OPENAI_TIMEOUT_S", "60")),  # type: ignore[arg-type]
                "gpt": {"model": _env("OPENAI_GPT_MODEL", "gpt-5-nano-2025-08-07")},
                "whisper": {"model": _env("OPENAI_WHISPER_MODEL", "whisper-1")},
                "topic_prompt": {
                    "id": _env("OPENAI_TOPIC_PROMPT_ID", ""),
                    "version": _env("OPENAI_TOPIC_PROMPT_VERSION", "1"),
                },
            }
            server_data: dict[str, Any] = {
                "environment": _env("APP_ENV", "development"),
                "host": _env("HOST", "0.0.0.0"),
                "port": int(_env("PORT", "3001")),  # type: ignore[arg-type]
                "api_prefix": _env("API_PREFIX", "/api"),
                "cors_origins": [
                    origin.strip()
                    for origin in (_env("CORS_ORIGIN", "http://localhost:3000") or "").split(",")
                    if origin.strip()
                ],
            }
            rate_limit_data: dict[str, Any] = {
                "window_s": float(_env("RATE_LIMIT_WINDOW_S", "900")),  # type: ignore[arg-type]
                "max_requests": int(_env("RATE_LIMIT_MAX_REQUESTS", "100")),  # type: ignore[arg-type]
            }
            logging_data: dict[str, Any] = {
                "level": (_env("SPEAKPRACTICE_LOG_LEVEL", "INFO") or "INFO").upper(),
                "format": (_env("SPEAKPRACTICE_LOG_FORMAT", "standard") or "standard").lower(),
            }

            return cls.model_validate(
                {
                    "openai": openai_data,
                    "server": server_data,
                    "rate_limit": rate_limit_data,
                    "logging": logging_data,
                }
            )
        except Exception as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

    def with_overrides(self, overrides: dict[str, Any]) -> "AppSettings":
        """Create new settings with partial overrides applied.

        Args:
            overrides: Dictionary of overrides using dotted notation.
                Example: {"openai.gpt.model": "gpt-4.1", "server.port": 8080}

        Returns:
            New AppSettings instance with overrides applied.

        Raises:
            ConfigOverrideError: If override key is invalid or type mismatches.
        """
        from speakpractice.exceptions import ConfigOverrideError

        data = self.model_dump(mode="python")

        last_key: str = ""
        for key, value in overrides.items():
            last_key = key
            parts = key.split(".")
            current = data
            for part in parts[:-1]:
                if not isinstance(current, dict) or part not in current:
                    raise ConfigOverrideError(
                        f"Invalid override key: {key}", field_path=key
                    )
                current = current[part]

            final_key = parts[-1]
            if not isinstance(current, dict) or final_key not in current:
                raise ConfigOverrideError(
                    f"Invalid override key: {key}", field_path=key
                )

            current[final_key] = value

        try:
            return self.model_validate(data)
        except Exception as e:
            raise ConfigOverrideError(
                f"Override validation failed: {e}", field_path=last_key
            ) from e

    def require_provider_credentials(self) -> None:
        """Check that the provider API key is usable.

        Raises:
            ConfigError: If the key is empty or still the placeholder value.
        """
        from speakpractice.exceptions import ConfigError

        key = self.openai.api_key.strip()
        if not key or key == PLACEHOLDER_API_KEY:
            raise ConfigError(
                "OpenAI API key is not configured. Set OPENAI_API_KEY in your environment",
                field_path="openai.api_key",
            )

