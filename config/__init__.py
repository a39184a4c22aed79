"""Configuration management."""

from .config_manager import ConfigManager
from .models import AppConfig, ApiConfig, UiConfig, LoggingConfig

__all__ = ["ConfigManager", "AppConfig", "ApiConfig", "UiConfig", "LoggingConfig"]
