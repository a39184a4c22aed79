"""
YAML-backed string resources.

Resource files live in ``{resources_dir}/{scope}.{language}.yaml`` and hold a
flat ``key: text`` mapping. A key missing from the requested language falls
back to the fallback language; a key missing everywhere resolves to itself
with ``resource_not_found=True``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from ..domain.exceptions import ConfigurationError
from ..domain.interfaces.localizer import LocalizedString
from ..utils.logging_setup import get_logger

logger = get_logger(__name__)


class YamlLocalizer:
    """
    Usage:
        L = YamlLocalizer.load("resources", scope="pages", language="de")
        L["Ribbon_Back"].value  # "Zurück"
    """

    def __init__(self, strings: Mapping[str, str], fallback: Optional[Mapping[str, str]] = None,
                 language: str = "en"):
        self._strings: Dict[str, str] = dict(strings)
        self._fallback: Dict[str, str] = dict(fallback or {})
        self.language = language

    @classmethod
    def load(cls, resources_dir: str | Path, scope: str = "pages", language: str = "en",
             fallback_language: str = "en") -> "YamlLocalizer":
        directory = Path(resources_dir)
        fallback = cls._load_file(directory / f"{scope}.{fallback_language}.yaml")
        if language == fallback_language:
            strings = fallback
        else:
            strings = cls._load_file(directory / f"{scope}.{language}.yaml")
        logger.info(f"Loaded {len(strings)} '{scope}' resources for '{language}'")
        return cls(strings, fallback, language)

    @staticmethod
    def _load_file(path: Path) -> Dict[str, str]:
        if not path.exists():
            logger.warning(f"Resource file not found: {path}")
            return {}
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Resource file {path} must contain a mapping")
        return {str(k): str(v) for k, v in raw.items()}

    def __getitem__(self, key: str) -> LocalizedString:
        if key in self._strings:
            return LocalizedString(key, self._strings[key])
        if key in self._fallback:
            return LocalizedString(key, self._fallback[key])
        return LocalizedString(key, key, resource_not_found=True)

    def __contains__(self, key: str) -> bool:
        return key in self._strings or key in self._fallback
