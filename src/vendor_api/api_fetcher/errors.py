from __future__ import annotations

from typing import Optional


class VendorApiError(RuntimeError):
    """Base error for every failure raised by the retrieval engine."""


class ConfigError(VendorApiError):
    """Raised when a registry or vendor config file is missing or malformed."""


class EndpointNotFoundError(VendorApiError):
    """Raised when the requested endpoint is not declared for the vendor."""

    def __init__(self, vendor_name: str, endpoint_name: str) -> None:
        self.vendor_name = vendor_name
        self.endpoint_name = endpoint_name
        super().__init__(
            f"Endpoint '{endpoint_name}' not found for vendor '{vendor_name}'"
        )


class AuthError(VendorApiError):
    """Raised when no usable Authorization header can be built."""


class UnsupportedPaginationError(VendorApiError):
    """Raised when an endpoint resolves to a pagination mode the engine cannot run."""


class TransportError(VendorApiError):
    """Raised when the HTTP request itself fails (connection error, timeout)."""


class InvalidResponseError(VendorApiError):
    """Raised when a successful response does not carry valid JSON."""


class HttpError(VendorApiError):
    """Raised for non-2xx HTTP responses."""

    def __init__(
        self,
        status_code: int,
        endpoint_name: str,
        url: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.endpoint_name = endpoint_name
        self.url = url
        super().__init__(f"HTTP {status_code} for {endpoint_name}")
