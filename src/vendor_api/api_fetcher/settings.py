from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .api_service import RetrievalEngine
from .client_base import BaseAPIClient
from .errors import ConfigError
from .file_loader import JsonFileLoader
from .registry import VendorRegistry
from .vendor_config import VendorConfigService


logger = logging.getLogger(__name__)


class Settings:
    """
    Runtime settings read from the environment.

    VENDOR_API_REGISTRY     - Path to the vendor registry JSON file (required)
    VENDOR_API_TIMEOUT_SEC  - Request timeout in seconds (default: none, wait forever)
    VENDOR_API_USER_AGENT   - Override the default User-Agent header
    """

    def __init__(self) -> None:
        self.registry_path: Optional[str] = os.getenv("VENDOR_API_REGISTRY") or None
        self.user_agent: Optional[str] = os.getenv("VENDOR_API_USER_AGENT") or None

        timeout_raw = (os.getenv("VENDOR_API_TIMEOUT_SEC") or "").strip()
        self.timeout: Optional[float] = None
        if timeout_raw:
            try:
                self.timeout = float(timeout_raw)
            except ValueError as e:
                raise ConfigError(
                    f"VENDOR_API_TIMEOUT_SEC must be a number, got '{timeout_raw}'."
                ) from e
            if self.timeout <= 0:
                raise ConfigError(
                    f"VENDOR_API_TIMEOUT_SEC must be positive, got '{timeout_raw}'."
                )


def build_engine_from_env(settings: Optional[Settings] = None) -> RetrievalEngine:
    """
    Wire the config caches, HTTP client and engine from environment settings.

    Relative ``configFilePath`` values in the registry resolve against the
    registry file's directory.
    """
    settings = settings or Settings()
    if not settings.registry_path:
        raise ConfigError("VENDOR_API_REGISTRY must point to the vendor registry file.")

    registry_path = Path(settings.registry_path).expanduser().resolve()
    loader = JsonFileLoader(base_dir=registry_path.parent)
    registry = VendorRegistry(registry_path, loader=loader)
    config_service = VendorConfigService(registry, loader=loader)
    client = BaseAPIClient(timeout=settings.timeout, user_agent=settings.user_agent)

    logger.info(f"Retrieval engine configured from registry {registry_path}")
    return RetrievalEngine(config_service, client=client)
