"""Per-vendor endpoint definitions and connection settings, loaded once per vendor."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from pydantic import ValidationError

from .errors import ConfigError
from .file_loader import JsonFileLoader
from .registry import VendorRegistry
from .schema import EndpointDefinition, VendorConnectionConfig


logger = logging.getLogger(__name__)


class VendorConfigService:
    """
    Cache of parsed vendor config files, keyed by lower-cased vendor name.

    The first lookup for a vendor resolves its file through the registry,
    parses the matching ``entries`` item and keeps the result. Concurrent
    first lookups for the same vendor wait on a per-vendor lock so the file
    is parsed once.
    """

    def __init__(
        self,
        registry: VendorRegistry,
        loader: Optional[JsonFileLoader] = None,
    ) -> None:
        self.registry = registry
        self.loader = loader or registry.loader
        self._configs: Dict[str, VendorConnectionConfig] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def reset(self) -> None:
        with self._locks_guard:
            self._configs.clear()
            self._locks.clear()

    # ---------------------------------------------------
    # Loading
    # ---------------------------------------------------
    def get_connection_config(self, vendor_name: str) -> VendorConnectionConfig:
        """
        Return the parsed config of ``vendor_name``, loading it on first use.

        Raises:
            ConfigError: unknown vendor, unreadable file, or malformed content
        """
        key = vendor_name.lower()
        config = self._configs.get(key)
        if config is not None:
            return config

        with self._lock_for(key):
            config = self._configs.get(key)
            if config is None:
                try:
                    config = self._load(vendor_name)
                except Exception:
                    self._drop_lock(key)
                    raise
                self._configs[key] = config
            return config

    def _drop_lock(self, key: str) -> None:
        # Loaded vendors keep their lock; failed ones must not accumulate.
        with self._locks_guard:
            self._locks.pop(key, None)

    def _load(self, vendor_name: str) -> VendorConnectionConfig:
        file_path = self.registry.resolve(vendor_name)
        data = self.loader.load(file_path)

        entries = data.get("entries") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ConfigError(
                f"Config file {file_path} for vendor '{vendor_name}' does not "
                f"contain an 'entries' array"
            )

        key = vendor_name.lower()
        entry = next(
            (
                e for e in entries
                if isinstance(e, dict) and str(e.get("vendor") or "").lower() == key
            ),
            None,
        )
        if entry is None or not isinstance(entry.get("endpoints"), list):
            raise ConfigError(
                f"Vendor '{vendor_name}' not found or its 'endpoints' array is "
                f"missing in {file_path}"
            )

        try:
            config = VendorConnectionConfig.model_validate(entry)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid config for vendor '{vendor_name}' in {file_path}: {e}"
            ) from e

        logger.info(
            f"Vendor config loaded for '{config.vendor}' from {file_path}: "
            f"{len(config.endpoints)} endpoint(s)"
        )
        return config

    # ---------------------------------------------------
    # Endpoint queries
    # ---------------------------------------------------
    def get_endpoints(self, vendor_name: str) -> List[EndpointDefinition]:
        return list(self.get_connection_config(vendor_name).endpoints)

    def get_endpoint(
        self, vendor_name: str, endpoint_name: str
    ) -> Optional[EndpointDefinition]:
        """Case-insensitive lookup; None when the vendor has no such endpoint."""
        key = endpoint_name.lower()
        for endpoint in self.get_connection_config(vendor_name).endpoints:
            if endpoint.name.lower() == key:
                return endpoint
        return None

    def get_endpoints_by_family(
        self, vendor_name: str, family: str
    ) -> List[EndpointDefinition]:
        key = family.lower()
        return [
            e for e in self.get_connection_config(vendor_name).endpoints
            if (e.family or "").lower() == key
        ]

    def get_endpoint_names(self, vendor_name: str) -> List[str]:
        return [e.name for e in self.get_endpoints(vendor_name)]

    def get_endpoint_names_by_family(self, vendor_name: str, family: str) -> List[str]:
        return [e.name for e in self.get_endpoints_by_family(vendor_name, family)]
