from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class _ConfigModel(BaseModel):
    """Shared settings: accept both JSON (camelCase) keys and field names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------
# Registry
# ---------------------------------------------------
class VendorRegistryEntry(_ConfigModel):
    """One line of the registry file: where a vendor's config lives."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    vendor_name: str = Field(..., alias="vendorName", min_length=1)
    config_file_path: str = Field(..., alias="configFilePath", min_length=1)


# ---------------------------------------------------
# Pagination strategies (tagged union)
# ---------------------------------------------------
class NonePagination(_ConfigModel):
    kind: Literal["none"] = "none"


class PageBeanPagination(_ConfigModel):
    """
    Page-oriented protocol (startAt / maxResults / total / isLast / nextPage).

    ``start_at`` and ``max_results`` are only defaults: values already present
    in the caller's query parameters win.
    """

    kind: Literal["pagebean"] = "pagebean"
    start_at: int = Field(0, alias="startAt", ge=0)
    max_results: Optional[int] = Field(None, alias="maxResults", gt=0)
    start_at_param: str = Field("startAt", alias="startAtParam")
    max_results_param: str = Field("maxResults", alias="maxResultsParam")


class CursorPagination(_ConfigModel):
    """Opaque continuation token returned by the server on every page."""

    kind: Literal["cursor"] = "cursor"
    initial_token: Optional[str] = Field(None, alias="initialToken")
    next_token_field: str = Field(..., alias="nextTokenField", min_length=1)
    page_size_field: str = Field(..., alias="pageSizeField", min_length=1)
    default_page_size: int = Field(..., alias="defaultPageSize", gt=0)
    last_field: str = Field("isLast", alias="lastField", min_length=1)


class OffsetPagination(_ConfigModel):
    # Declared by vendor files but not executed by the engine.
    kind: Literal["offset"] = "offset"
    offset_field: str = Field(..., alias="offsetField")
    limit_field: str = Field(..., alias="limitField")
    default_limit: int = Field(..., alias="defaultLimit")


class UnsupportedPagination(_ConfigModel):
    """Holds a pagination value whose shape matched none of the known modes."""

    kind: Literal["unsupported"] = "unsupported"
    raw: Any = None


PaginationStrategy = Union[
    NonePagination,
    PageBeanPagination,
    CursorPagination,
    OffsetPagination,
    UnsupportedPagination,
]

_PAGINATION_TYPES = (
    NonePagination,
    PageBeanPagination,
    CursorPagination,
    OffsetPagination,
    UnsupportedPagination,
)

_MODE_MODELS = {
    "pagebean": PageBeanPagination,
    "cursor": CursorPagination,
    "offset": OffsetPagination,
}


def parse_pagination(raw: Any) -> PaginationStrategy:
    """
    Decide the pagination variant for a raw config value, once, at load time.

    Shapes:
      - None / "none"                     -> NonePagination
      - {"cursor": {...}}                 -> CursorPagination
      - {"offset": {...}}                 -> OffsetPagination
      - {"mode": "<name>", ...}           -> the named variant
      - any other object                  -> PageBeanPagination (implicit)
      - anything else                     -> UnsupportedPagination
    """
    if isinstance(raw, _PAGINATION_TYPES):
        return raw

    if raw is None:
        return NonePagination()

    if isinstance(raw, str):
        if raw.strip().lower() == "none":
            return NonePagination()
        return UnsupportedPagination(raw=raw)

    if not isinstance(raw, dict):
        return UnsupportedPagination(raw=raw)

    if "cursor" in raw:
        return CursorPagination.model_validate(raw["cursor"])

    if "offset" in raw:
        return OffsetPagination.model_validate(raw["offset"])

    if "mode" in raw:
        mode = str(raw["mode"]).strip().lower()
        if mode == "none":
            return NonePagination()
        model = _MODE_MODELS.get(mode)
        if model is None:
            return UnsupportedPagination(raw=raw)
        fields = {k: v for k, v in raw.items() if k != "mode"}
        return model.model_validate(fields)

    return PageBeanPagination.model_validate(raw)


def _parse_pagination_key(data: Any) -> Any:
    # An absent key means "inherit"; an explicit value (even null) is an override.
    if isinstance(data, dict) and "pagination" in data:
        data = dict(data)
        data["pagination"] = parse_pagination(data["pagination"])
    return data


# ---------------------------------------------------
# Vendor config
# ---------------------------------------------------
class AuthAccess(_ConfigModel):
    """Names of the environment variables holding a vendor's credentials."""

    scheme: Optional[str] = Field(None, description="'bearer' forces a Bearer token")
    user_env: Optional[str] = Field(None, alias="userEnv")
    token_env: Optional[str] = Field(None, alias="tokenEnv")

    @field_validator("scheme", mode="before")
    @classmethod
    def normalize_scheme(cls, v):
        if v is None:
            return None
        v = str(v).strip().lower()
        return v or None


class EndpointDefinition(_ConfigModel):
    """One callable operation declared for a vendor."""

    name: str = Field(..., min_length=1)
    path: str = Field(..., description="Path relative to the vendor base URL")
    method: str = Field("GET", description="HTTP method, upper-cased")
    headers: Dict[str, str] = Field(default_factory=dict)
    pagination: Optional[PaginationStrategy] = Field(
        None, description="Override of the vendor default; None inherits it"
    )
    items_path: Optional[str] = Field(None, alias="itemsPath")
    family: Optional[str] = None
    operation_id: Optional[str] = Field(None, alias="operationId")
    enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def parse_pagination_override(cls, data):
        return _parse_pagination_key(data)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v):
        if v is None:
            return "GET"
        return str(v).strip().upper() or "GET"

    @field_validator("headers", mode="before")
    @classmethod
    def validate_headers(cls, v):
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): "" if val is None else str(val) for k, val in v.items()}
        return v


class VendorConnectionConfig(_ConfigModel):
    """Connection-level settings of one vendor entry, with its endpoints."""

    vendor: str = Field(..., min_length=1)
    base_url: str = Field(..., alias="baseURL")
    api_access: Optional[AuthAccess] = Field(None, alias="apiAccess")
    pagination: Optional[PaginationStrategy] = None
    endpoints: List[EndpointDefinition] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def parse_default_pagination(cls, data):
        return _parse_pagination_key(data)

    def effective_pagination(self, endpoint: EndpointDefinition) -> PaginationStrategy:
        """Endpoint override, then vendor default, then no pagination."""
        if endpoint.pagination is not None:
            return endpoint.pagination
        if self.pagination is not None:
            return self.pagination
        return NonePagination()
