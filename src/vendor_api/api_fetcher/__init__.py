"""
vendor-api - API Fetcher Module

This module retrieves record collections from REST APIs described in JSON
config files instead of hand-written per-vendor clients.

Why this module exists:
----------------------
Every vendor paginates, authenticates and wraps its records differently:
1. Some return page beans (startAt / maxResults / total / isLast)
2. Some return an opaque continuation token
3. Records sit under "issues", "values", "data", ... depending on the API

One engine reads the endpoint description and handles all of these.

Usage:
------
    from vendor_api.api_fetcher import build_engine_from_env

    engine = build_engine_from_env()
    projects = engine.get_data("Atlassian", "getProjects", {"maxResults": 50})

Configuration:
--------------
    VENDOR_API_REGISTRY     - Path to the vendor registry JSON file
    VENDOR_API_TIMEOUT_SEC  - Request timeout (default: no timeout)
    VENDOR_API_USER_AGENT   - User-Agent override

Credentials are named by each vendor's "apiAccess" block and read from the
environment at call time.
"""

# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------
from .errors import (
    VendorApiError,
    ConfigError,
    EndpointNotFoundError,
    AuthError,
    HttpError,
    UnsupportedPaginationError,
    TransportError,
    InvalidResponseError,
)

# -----------------------------------------------------------------------------
# Config models and caches
# -----------------------------------------------------------------------------
from .schema import (
    AuthAccess,
    CursorPagination,
    EndpointDefinition,
    NonePagination,
    OffsetPagination,
    PageBeanPagination,
    UnsupportedPagination,
    VendorConnectionConfig,
    VendorRegistryEntry,
    parse_pagination,
)
from .file_loader import JsonFileLoader
from .registry import VendorRegistry
from .vendor_config import VendorConfigService

# -----------------------------------------------------------------------------
# Retrieval
# -----------------------------------------------------------------------------
from .client_base import BaseAPIClient
from .request_builder import RequestDescriptor, build_request, substitute
from .normalizer import extract_items, decode_records
from .api_service import RetrievalEngine
from .settings import Settings, build_engine_from_env


__all__ = [
    # Errors
    "VendorApiError",
    "ConfigError",
    "EndpointNotFoundError",
    "AuthError",
    "HttpError",
    "UnsupportedPaginationError",
    "TransportError",
    "InvalidResponseError",
    # Config
    "AuthAccess",
    "CursorPagination",
    "EndpointDefinition",
    "NonePagination",
    "OffsetPagination",
    "PageBeanPagination",
    "UnsupportedPagination",
    "VendorConnectionConfig",
    "VendorRegistryEntry",
    "parse_pagination",
    "JsonFileLoader",
    "VendorRegistry",
    "VendorConfigService",
    # Retrieval
    "BaseAPIClient",
    "RequestDescriptor",
    "build_request",
    "substitute",
    "extract_items",
    "decode_records",
    "RetrievalEngine",
    "Settings",
    "build_engine_from_env",
]
