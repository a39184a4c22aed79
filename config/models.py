"""Configuration data models."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


@dataclass
class ApiConfig:
    """Backend REST API connection."""
    base_url: str
    timeout_sec: float = 30.0
    token: Optional[str] = None  # bearer token, normally from secrets.yaml


@dataclass
class UiConfig:
    """View-model layer settings."""
    language: str = "en"
    fallback_language: str = "en"
    resources_dir: str = "./resources"
    default_page_size: int = 50
    postings_page_size: int = 50


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    json: bool = True
    dir: str = "./logs"
    console: bool = False
    timezone: str = "local"


@dataclass
class AppConfig:
    """Complete application configuration."""
    api: ApiConfig
    ui: UiConfig
    logging: LoggingConfig
    raw: Dict[str, Any] = field(default_factory=dict)
