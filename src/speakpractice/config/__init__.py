"""Configuration management for speakpractice.

This package provides the AppSettings configuration system, including
YAML and environment loading, overrides and startup validation.
"""

from speakpractice.config.settings import (
    AppSettings,
    GPTConfig,
    LoggingConfig,
    NamedPromptConfig,
    OpenAIConfig,
    RateLimitConfig,
    ServerConfig,
    WhisperConfig,
)

__all__ = [
    "AppSettings",
    "OpenAIConfig",
    "WhisperConfig",
    "GPTConfig",
    "NamedPromptConfig",
    "ServerConfig",
    "RateLimitConfig",
    "LoggingConfig",
]
