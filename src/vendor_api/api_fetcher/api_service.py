from __future__ import annotations

import logging
import os
from typing import Any, List, Mapping, Optional, Sequence

from .client_base import BaseAPIClient
from .errors import EndpointNotFoundError
from .normalizer import RecordDecoder, decode_records
from .pagination import paginate
from .request_builder import RequestDescriptor, build_request
from .vendor_config import VendorConfigService


logger = logging.getLogger(__name__)


class RetrievalEngine:
    """
    Generic retrieval over declaratively configured vendor endpoints.

    The engine owns no configuration state of its own: it reads endpoint and
    connection settings from the injected ``VendorConfigService`` and sends
    requests through the injected HTTP client, so both caches and transport
    can be shared, reset or faked explicitly.
    """

    def __init__(
        self,
        config_service: VendorConfigService,
        client: Optional[BaseAPIClient] = None,
        environ: Optional[Mapping[str, str]] = None,
        decoders: Optional[Sequence[RecordDecoder]] = None,
    ) -> None:
        self.config_service = config_service
        # Shared by every call on this engine, including its session cookies.
        self.client = client or BaseAPIClient()
        # Read lazily through the mapping so later environment changes apply.
        self.environ: Mapping[str, str] = environ if environ is not None else os.environ
        self.decoders = list(decoders or [])

    def build_request(
        self,
        vendor_name: str,
        endpoint_name: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> RequestDescriptor:
        """Build (without sending) the first request of a ``get_data`` call."""
        endpoint = self.config_service.get_endpoint(vendor_name, endpoint_name)
        if endpoint is None:
            raise EndpointNotFoundError(vendor_name, endpoint_name)
        connection = self.config_service.get_connection_config(vendor_name)
        return build_request(connection, endpoint, params, self.environ)

    def get_data(
        self,
        vendor_name: str,
        endpoint_name: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Any]:
        """
        Retrieve every record exposed by one vendor endpoint.

        Steps: endpoint lookup, request construction (URL, auth, query or
        body), the pagination loop of the endpoint's strategy, item
        extraction per page, then the decoding pass.

        Args:
            vendor_name: Vendor name (case-insensitive)
            endpoint_name: Endpoint name (case-insensitive)
            params: Query parameters for GET, JSON body for other methods

        Returns:
            Flat list of records in page-fetch order

        Raises:
            ConfigError: unknown vendor or malformed config
            EndpointNotFoundError: endpoint not declared for the vendor
            AuthError: no usable credentials
            UnsupportedPaginationError: offset or unrecognized pagination
            HttpError: any non-2xx response; no partial results are returned
            TransportError: connection failure or timeout
            InvalidResponseError: a 2xx response that is not JSON
        """
        endpoint = self.config_service.get_endpoint(vendor_name, endpoint_name)
        if endpoint is None:
            raise EndpointNotFoundError(vendor_name, endpoint_name)

        connection = self.config_service.get_connection_config(vendor_name)
        strategy = connection.effective_pagination(endpoint)
        request = build_request(connection, endpoint, params, self.environ)

        logger.info(
            f"Fetching {connection.vendor}/{endpoint.name} "
            f"({endpoint.method}, pagination={strategy.kind})"
        )

        def fetch(page_request: RequestDescriptor) -> Any:
            return self.client.send(page_request, endpoint.name)

        records = paginate(
            strategy,
            request,
            fetch,
            items_path=endpoint.items_path,
            endpoint_name=endpoint.name,
        )

        logger.info(f"Fetched {len(records)} record(s) from {connection.vendor}/{endpoint.name}")
        return decode_records(records, self.decoders)
