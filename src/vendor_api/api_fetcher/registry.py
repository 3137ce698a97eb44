from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from .errors import ConfigError
from .file_loader import JsonFileLoader
from .schema import VendorRegistryEntry


logger = logging.getLogger(__name__)


class VendorRegistry:
    """
    Resolves a vendor name to the path of its config file.

    The registry file has the shape::

        {"vendors": [{"vendorName": "Atlassian", "configFilePath": "atlassian.json"}]}

    It is read lazily on the first lookup and kept for the lifetime of the
    instance. Lookups for unknown vendors never re-read the file; call
    ``reset()`` to force a reload. A load that fails is not remembered, so the
    next lookup tries again.
    """

    def __init__(
        self,
        registry_path: Union[str, Path],
        loader: Optional[JsonFileLoader] = None,
    ) -> None:
        self.registry_path = str(registry_path)
        self.loader = loader or JsonFileLoader()
        self._entries: Optional[Dict[str, VendorRegistryEntry]] = None
        self._lock = threading.Lock()

    # ---------------------------------------------------
    # Loading
    # ---------------------------------------------------
    def _ensure_loaded(self) -> Dict[str, VendorRegistryEntry]:
        entries = self._entries
        if entries is not None:
            return entries

        with self._lock:
            # Another thread may have finished the load while we waited.
            if self._entries is None:
                self._entries = self._load()
            return self._entries

    def _load(self) -> Dict[str, VendorRegistryEntry]:
        data = self.loader.load(self.registry_path)

        vendors = data.get("vendors") if isinstance(data, dict) else None
        if not isinstance(vendors, list):
            raise ConfigError(
                f"Registry file {self.registry_path} does not contain a 'vendors' array"
            )

        entries: Dict[str, VendorRegistryEntry] = {}
        for index, raw in enumerate(vendors):
            try:
                entry = VendorRegistryEntry.model_validate(raw)
            except ValidationError as e:
                raise ConfigError(
                    f"Registry file {self.registry_path}: invalid vendor entry #{index}: {e}"
                ) from e
            key = entry.vendor_name.lower()
            if key in entries:
                logger.warning(
                    f"Registry file {self.registry_path}: duplicate vendor "
                    f"'{entry.vendor_name}', keeping the first entry"
                )
                continue
            entries[key] = entry

        logger.info(
            f"Vendor registry loaded from {self.registry_path}: {len(entries)} vendor(s)"
        )
        return entries

    def reset(self) -> None:
        with self._lock:
            self._entries = None

    # ---------------------------------------------------
    # Lookups
    # ---------------------------------------------------
    @property
    def entries(self) -> List[VendorRegistryEntry]:
        return list(self._ensure_loaded().values())

    def vendor_names(self) -> List[str]:
        return [e.vendor_name for e in self.entries]

    def resolve(self, vendor_name: str) -> str:
        """
        Return the config file path registered for ``vendor_name``.

        Raises:
            ConfigError: if the vendor is not registered
        """
        entry = self._ensure_loaded().get(vendor_name.lower())
        if entry is None:
            raise ConfigError(
                f"Vendor '{vendor_name}' not found in registry {self.registry_path}"
            )
        return entry.config_file_path
