from __future__ import annotations

import hashlib
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .errors import ConfigError


logger = logging.getLogger(__name__)


class JsonFileLoader:
    """
    Reads and parses JSON configuration files.

    Parsed content is cached per absolute path together with the sha256
    fingerprint of the raw text, so an edited file is parsed again on the
    next load while an unchanged one is served from memory.
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self._cache: Dict[Path, Tuple[str, Any]] = {}
        self._lock = threading.Lock()

    def resolve(self, file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.base_dir / path
        return path.resolve()

    def load(self, file_path: Union[str, Path]) -> Any:
        """
        Load and parse a JSON file.

        Raises:
            ConfigError: if the file cannot be read or is not valid JSON
        """
        path = self.resolve(file_path)

        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        fingerprint = hashlib.sha256(raw.encode("utf-8")).hexdigest()

        with self._lock:
            cached = self._cache.get(path)
        if cached is not None and cached[0] == fingerprint:
            logger.debug(f"Config cache hit: {path}")
            return cached[1]

        try:
            content = json.loads(raw)
        except ValueError as e:
            raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e

        with self._lock:
            self._cache[path] = (fingerprint, content)

        logger.info(f"Loaded config file {path} (sha256={fingerprint[:12]})")
        return content

    def invalidate(self, file_path: Union[str, Path]) -> None:
        with self._lock:
            self._cache.pop(self.resolve(file_path), None)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
