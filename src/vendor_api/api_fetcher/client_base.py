from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .errors import HttpError, InvalidResponseError, TransportError
from .request_builder import RequestDescriptor


logger = logging.getLogger(__name__)


class BaseAPIClient:
    """
    HTTP transport shared by every vendor call.

    Features:
    - Persistent session
    - Default headers
    - No retries: every failure is final for the call
    - Optional timeout (None blocks until the server answers)
    - Safe JSON parsing
    """

    DEFAULT_USER_AGENT = "vendor-api/0.1"

    def __init__(
        self,
        default_headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ) -> None:

        self.timeout = timeout

        self.session = requests.Session()

        # Default headers
        headers = {
            "User-Agent": user_agent or self.DEFAULT_USER_AGENT,
            "Accept": "application/json",
        }

        if default_headers:
            headers.update(default_headers)

        self.session.headers.update(headers)

        # Failed calls are never retried, not even on connection errors.
        retry_strategy = Retry(total=0, raise_on_status=False)

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    # ---------------------------------------------------
    # Core request method
    # ---------------------------------------------------
    def send(self, request: RequestDescriptor, endpoint_name: str) -> Any:
        """
        Execute one request and return its decoded JSON body.

        An empty body decodes to None.

        Raises:
            HttpError: non-2xx status
            TransportError: connection failure or timeout
            InvalidResponseError: 2xx body that is not JSON
        """
        url = request.url

        try:
            response = self.session.request(
                request.method,
                url,
                params=request.query or None,
                headers=request.headers,
                data=request.body.encode("utf-8") if request.body is not None else None,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransportError(
                f"Request timed out calling {url} for {endpoint_name}"
            ) from e
        except requests.RequestException as e:
            raise TransportError(
                f"Request failed calling {url} for {endpoint_name}"
            ) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"HTTP {response.status_code} returned from {url} for {endpoint_name}")
            raise HttpError(response.status_code, endpoint_name, url=url)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"Invalid JSON returned from {url} for {endpoint_name}"
            ) from e

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "BaseAPIClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
