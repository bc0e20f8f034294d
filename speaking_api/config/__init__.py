"""Configuration package."""

from .settings import OpenAIConfig, Settings, settings

__all__ = ["OpenAIConfig", "Settings", "settings"]
