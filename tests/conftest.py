import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from vendor_api.api_fetcher.file_loader import JsonFileLoader
from vendor_api.api_fetcher.registry import VendorRegistry
from vendor_api.api_fetcher.vendor_config import VendorConfigService


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")


class FakeClient:
    """Stands in for BaseAPIClient: replays payloads and records requests."""

    def __init__(self, payloads=None, errors=None):
        self.payloads = list(payloads or [])
        # {call_index: exception} raised instead of returning a payload
        self.errors = dict(errors or {})
        self.requests = []

    def send(self, request, endpoint_name):
        index = len(self.requests)
        self.requests.append(request)
        if index in self.errors:
            raise self.errors[index]
        if index >= len(self.payloads):
            raise AssertionError(f"Unexpected request #{index + 1} to {request.full_url}")
        return self.payloads[index]


ATLASSIAN_CONFIG = {
    "entries": [
        {
            "vendor": "Atlassian",
            "baseURL": "https://${JIRA_DOMAIN}.atlassian.net/rest/api/3",
            "apiAccess": {"userEnv": "JIRA_LOGIN", "tokenEnv": "JIRA_TOKEN"},
            "pagination": {"startAt": 0},
            "endpoints": [
                {
                    "name": "getProjects",
                    "family": "project",
                    "path": "/project/search",
                    "method": "GET",
                    "headers": {"Accept": "application/json", "Authorization": "${AUTH_HEADER}"},
                },
                {
                    "name": "getIssues",
                    "family": "search",
                    "path": "/search/jql",
                    "method": "GET",
                    "headers": {},
                    "itemsPath": "issues",
                    "pagination": {
                        "cursor": {
                            "initialToken": None,
                            "nextTokenField": "nextPageToken",
                            "pageSizeField": "maxResults",
                            "defaultPageSize": 100,
                        }
                    },
                },
                {
                    "name": "countIssues",
                    "family": "search",
                    "path": "/search/approximate-count",
                    "method": "POST",
                    "headers": {},
                    "pagination": "none",
                },
                {
                    "name": "getFields",
                    "path": "/field",
                    "method": "GET",
                    "headers": {},
                    "pagination": None,
                },
                {
                    "name": "getAuditRecords",
                    "path": "/auditing/record",
                    "method": "GET",
                    "headers": {},
                    "pagination": {
                        "offset": {"offsetField": "offset", "limitField": "limit", "defaultLimit": 100}
                    },
                },
            ],
        }
    ]
}


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def config_dir(tmp_path):
    """Registry + Atlassian vendor file laid out like a real deployment."""
    write_json(tmp_path / "atlassian.json", ATLASSIAN_CONFIG)
    write_json(
        tmp_path / "registry.json",
        {"vendors": [{"vendorName": "Atlassian", "configFilePath": "atlassian.json"}]},
    )
    return tmp_path


@pytest.fixture
def loader(config_dir):
    return JsonFileLoader(base_dir=config_dir)


@pytest.fixture
def registry(loader):
    return VendorRegistry("registry.json", loader=loader)


@pytest.fixture
def config_service(registry):
    return VendorConfigService(registry)


@pytest.fixture
def environ():
    return {"JIRA_DOMAIN": "acme", "JIRA_LOGIN": "bot@acme.io", "JIRA_TOKEN": "s3cret"}


@pytest.fixture
def make_client():
    return FakeClient
