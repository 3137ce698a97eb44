from __future__ import annotations

import base64
import dataclasses
import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .errors import AuthError
from .schema import AuthAccess, EndpointDefinition, VendorConnectionConfig


logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\$\{(\w+)\}")

AUTH_PLACEHOLDER = "${AUTH_HEADER}"

QueryPairs = List[Tuple[str, str]]


@dataclasses.dataclass
class RequestDescriptor:
    """
    One fully built HTTP request.

    ``url`` carries no query string; query parameters live in ``query`` as
    ordered pairs so repeated names survive.
    """

    url: str
    method: str
    headers: Dict[str, str]
    query: QueryPairs = dataclasses.field(default_factory=list)
    body: Optional[str] = None

    @property
    def full_url(self) -> str:
        if not self.query:
            return self.url
        return f"{self.url}?{urlencode(self.query)}"

    def get_param(self, name: str) -> Optional[str]:
        for key, value in self.query:
            if key == name:
                return value
        return None

    def with_param(self, name: str, value: Any) -> "RequestDescriptor":
        """Copy with every ``name`` pair replaced by a single one."""
        query = [(k, v) for k, v in self.query if k != name]
        query.append((name, _stringify(value)))
        return dataclasses.replace(self, query=query, headers=dict(self.headers))

    def with_url(self, url: str) -> "RequestDescriptor":
        """
        Copy targeting ``url`` (which may carry its own query string).

        Parameters of this request whose names are absent from ``url`` are
        appended after the ones ``url`` defines.
        """
        parts = urlsplit(url)
        query = parse_qsl(parts.query, keep_blank_values=True)
        present = {k for k, _ in query}
        query.extend((k, v) for k, v in self.query if k not in present)
        bare = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
        return dataclasses.replace(self, url=bare, query=query, headers=dict(self.headers))


# ---------------------------------------------------
# Placeholders
# ---------------------------------------------------
def substitute(template: str, environ: Mapping[str, str]) -> str:
    """Replace every ``${NAME}`` with ``environ[NAME]``, or "" when unset."""
    return _PLACEHOLDER.sub(lambda m: environ.get(m.group(1)) or "", template)


# ---------------------------------------------------
# URL and query encoding
# ---------------------------------------------------
def join_url(base_url: str, path: str) -> str:
    if path.startswith(("http://", "https://")):
        return path
    if not path:
        return base_url
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        return json.dumps(value)
    return str(value)


def encode_query(params: Optional[Mapping[str, Any]]) -> QueryPairs:
    """
    Turn call parameters into ordered query pairs.

    - list/tuple -> one pair per element, order kept
    - dict       -> a single JSON-serialized value
    - bool       -> "true" / "false"
    - None       -> omitted (also inside lists)
    """
    pairs: QueryPairs = []
    if not params:
        return pairs

    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _stringify(v)) for v in value if v is not None)
        else:
            pairs.append((key, _stringify(value)))
    return pairs


# ---------------------------------------------------
# Authorization
# ---------------------------------------------------
def _find_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    lowered = name.lower()
    for key in headers:
        if key.lower() == lowered:
            return key
    return None


def resolve_authorization(
    api_access: Optional[AuthAccess],
    environ: Mapping[str, str],
    vendor_name: str = "",
) -> str:
    """
    Build an Authorization header value from a vendor's ``apiAccess``.

    - scheme "bearer"        -> "Bearer <token>" (token required)
    - user and token set     -> "Basic base64(user:token)"
    - only token set         -> "Bearer <token>"

    Raises:
        AuthError: when no usable credentials resolve
    """
    access = api_access or AuthAccess()
    user = (environ.get(access.user_env) or "") if access.user_env else ""
    token = (environ.get(access.token_env) or "") if access.token_env else ""

    if access.scheme == "bearer":
        if not token:
            raise AuthError(
                f"Vendor '{vendor_name}': bearer scheme requires environment "
                f"variable '{access.token_env}' to be set"
            )
        return f"Bearer {token}"

    if user and token:
        encoded = base64.b64encode(f"{user}:{token}".encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"

    if token:
        return f"Bearer {token}"

    raise AuthError(f"Vendor '{vendor_name}': no usable credentials for Authorization")


# ---------------------------------------------------
# Request
# ---------------------------------------------------
def build_request(
    connection: VendorConnectionConfig,
    endpoint: EndpointDefinition,
    params: Optional[Mapping[str, Any]],
    environ: Mapping[str, str],
) -> RequestDescriptor:
    """Build the first request of a call. Raises AuthError before any I/O."""
    base_url = substitute(connection.base_url, environ)
    url = join_url(base_url, endpoint.path)
    method = endpoint.method

    headers: Dict[str, str] = {}
    raw_auth: Optional[str] = None
    for name, value in endpoint.headers.items():
        if name.lower() == "authorization":
            raw_auth = value
            continue
        headers[name] = substitute(value, environ)

    auth_value = ""
    if raw_auth is not None and raw_auth.strip() != AUTH_PLACEHOLDER:
        auth_value = substitute(raw_auth, environ).strip()
    if not auth_value:
        auth_value = resolve_authorization(connection.api_access, environ, connection.vendor)
    headers["Authorization"] = auth_value

    query: QueryPairs = []
    body: Optional[str] = None
    if method == "GET":
        query = encode_query(params)
    else:
        if params is not None:
            body = json.dumps(dict(params))
        if _find_header(headers, "Content-Type") is None:
            headers["Content-Type"] = "application/json"

    logger.debug(f"Built request for {connection.vendor}/{endpoint.name}: {method} {url}")
    return RequestDescriptor(url=url, method=method, headers=headers, query=query, body=body)
