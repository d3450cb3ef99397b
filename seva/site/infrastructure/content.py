"""
Site Content Store
==================

Loads the packaged bilingual page copy from YAML once per process.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from seva.core.exceptions import ConfigurationException
from seva.shared.infrastructure.logging import get_logger
from seva.site.application.services import IContentStore

logger = get_logger(__name__)

CONTENT_PATH = Path(__file__).resolve().parent.parent / "content.yaml"


class YamlContentStore(IContentStore):
    """Page copy keyed by language code."""

    def __init__(self, path: Optional[Path] = None):
        self._path = path or CONTENT_PATH
        self._content: Optional[Dict[str, Dict[str, Any]]] = None

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self._content is None:
            if not self._path.exists():
                raise ConfigurationException(f"Site content file not found: {self._path}")
            with open(self._path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigurationException("Site content must map language codes to content")
            self._content = data
            logger.info("Site content loaded", extra={"path": str(self._path), "languages": list(data)})
        return self._content

    def languages(self) -> List[str]:
        return list(self._load())

    def get(self, language: str) -> Dict[str, Any]:
        return self._load()[language]
