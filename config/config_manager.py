"""
Configuration manager with environment-based loading.

Supports:
- Base configuration (base.yaml)
- Environment-specific overrides (dev.yaml, prod.yaml)
- Secrets loading (secrets.yaml - gitignored, holds the API token)
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any
import yaml

from finance_ui.utils.logging_setup import get_logger

from .models import AppConfig, ApiConfig, UiConfig, LoggingConfig


logger = get_logger(__name__)


class ConfigManager:
    """
    Configuration manager with environment support.

    Loads configuration in this order:
    1. base.yaml (default config)
    2. {env}.yaml (environment-specific, e.g., dev.yaml)
    3. secrets.yaml (if exists, gitignored)

    Later configs override earlier ones; nested mappings are merged key by key.
    """

    def __init__(self, config_dir: str | Path = "config", env: str = "dev"):
        self.config_dir = Path(config_dir)
        self.env = env
        self.config: Dict[str, Any] = {}

    def load(self) -> AppConfig:
        """
        Load configuration from YAML files.

        Raises:
            FileNotFoundError: If base.yaml is missing.
            ValueError: If a file is not valid YAML or a value has the wrong type.
        """
        base_path = self.config_dir / "base.yaml"
        if not base_path.exists():
            raise FileNotFoundError(f"Base config not found: {base_path}")

        self.config = self._load_yaml(base_path)
        logger.info(f"Loaded base config from {base_path}")

        env_path = self.config_dir / f"{self.env}.yaml"
        if env_path.exists():
            self.config = self._merge_dicts(self.config, self._load_yaml(env_path))
            logger.info(f"Loaded {self.env} config from {env_path}")

        secrets_path = self.config_dir / "secrets.yaml"
        if secrets_path.exists():
            self.config = self._merge_dicts(self.config, self._load_yaml(secrets_path))
            logger.info("Loaded secrets")

        return self._parse_config()

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse config: {path}: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"Failed to parse config: {path} must contain a mapping")
        return data

    def _merge_dicts(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts (override wins)."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result

    def _parse_config(self) -> AppConfig:
        try:
            api_raw = self.config.get("api", {})
            api = ApiConfig(
                base_url=str(api_raw.get("base_url", "http://localhost:5000")).rstrip("/"),
                timeout_sec=float(api_raw.get("timeout_sec", 30.0)),
                token=api_raw.get("token") or None,
            )

            ui_raw = self.config.get("ui", {})
            ui = UiConfig(
                language=ui_raw.get("language", "en"),
                fallback_language=ui_raw.get("fallback_language", "en"),
                resources_dir=ui_raw.get("resources_dir", "./resources"),
                default_page_size=int(ui_raw.get("default_page_size", 50)),
                postings_page_size=int(ui_raw.get("postings_page_size", 50)),
            )

            logging_raw = self.config.get("logging", {})
            logging_config = LoggingConfig(
                level=str(logging_raw.get("level", "INFO")).upper(),
                json=bool(logging_raw.get("json", True)),
                dir=logging_raw.get("dir", "./logs"),
                console=bool(logging_raw.get("console", False)),
                timezone=logging_raw.get("timezone", "local"),
            )

            return AppConfig(api=api, ui=ui, logging=logging_config, raw=self.config)

        except Exception as e:
            raise ValueError(f"Failed to parse config: {e}")
