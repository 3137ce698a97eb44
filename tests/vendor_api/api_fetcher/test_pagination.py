import pytest

from vendor_api.api_fetcher.errors import HttpError, UnsupportedPaginationError
from vendor_api.api_fetcher.pagination import paginate
from vendor_api.api_fetcher.request_builder import RequestDescriptor
from vendor_api.api_fetcher.schema import (
    CursorPagination,
    NonePagination,
    OffsetPagination,
    PageBeanPagination,
    UnsupportedPagination,
)


@pytest.fixture
def request_template():
    return RequestDescriptor(
        url="https://acme.atlassian.net/rest/api/3/project/search",
        method="GET",
        headers={"Authorization": "Bearer t"},
        query=[("expand", "lead")],
    )


def cursor_strategy(**overrides):
    fields = dict(nextTokenField="nextPageToken", pageSizeField="maxResults", defaultPageSize=2)
    fields.update(overrides)
    return CursorPagination.model_validate(fields)


class TestNonePagination:
    @pytest.mark.unit
    def test_single_request(self, request_template, make_client):
        client = make_client([{"values": [{"id": 1}, {"id": 2}], "isLast": False}])
        items = paginate(NonePagination(), request_template, lambda r: client.send(r, "x"))
        assert items == [{"id": 1}, {"id": 2}]
        assert len(client.requests) == 1
        assert client.requests[0] is request_template

    @pytest.mark.unit
    def test_list_body(self, request_template, make_client):
        client = make_client([[{"id": "f1"}, {"id": "f2"}]])
        items = paginate(NonePagination(), request_template, lambda r: client.send(r, "x"))
        assert items == [{"id": "f1"}, {"id": "f2"}]


class TestPageBeanPagination:
    @pytest.mark.unit
    def test_advances_start_at_until_is_last(self, request_template, make_client):
        client = make_client(
            [
                {"startAt": 0, "maxResults": 2, "total": 5, "values": [{"id": 1}, {"id": 2}]},
                {"startAt": 2, "total": 5, "values": [{"id": 3}, {"id": 4}]},
                {"startAt": 4, "total": 5, "isLast": True, "values": [{"id": 5}]},
            ]
        )
        items = paginate(PageBeanPagination(), request_template, lambda r: client.send(r, "x"))

        assert items == [{"id": i} for i in range(1, 6)]
        assert len(client.requests) == 3
        assert client.requests[0].get_param("startAt") is None
        assert client.requests[1].get_param("startAt") == "2"
        assert client.requests[2].get_param("startAt") == "4"
        assert all(r.get_param("expand") == "lead" for r in client.requests)

    @pytest.mark.unit
    def test_follows_next_page_and_merges_params(self, request_template, make_client):
        next_url = "https://acme.atlassian.net/rest/api/3/project/search?startAt=2&maxResults=2"
        client = make_client(
            [
                {"values": [{"id": 1}, {"id": 2}], "nextPage": next_url, "isLast": False},
                {"values": [{"id": 3}], "isLast": True},
            ]
        )
        items = paginate(PageBeanPagination(), request_template, lambda r: client.send(r, "x"))

        assert items == [{"id": 1}, {"id": 2}, {"id": 3}]
        second = client.requests[1]
        assert second.url == "https://acme.atlassian.net/rest/api/3/project/search"
        assert second.query == [("startAt", "2"), ("maxResults", "2"), ("expand", "lead")]

    @pytest.mark.unit
    def test_stops_when_next_start_reaches_total(self, request_template, make_client):
        client = make_client(
            [
                {"startAt": 0, "maxResults": 2, "total": 4, "values": [{"id": 1}, {"id": 2}]},
                {"startAt": 2, "maxResults": 2, "total": 4, "values": [{"id": 3}, {"id": 4}]},
            ]
        )
        items = paginate(PageBeanPagination(), request_template, lambda r: client.send(r, "x"))
        assert len(items) == 4
        assert len(client.requests) == 2

    @pytest.mark.unit
    def test_stops_on_short_page(self, request_template, make_client):
        client = make_client(
            [
                {"startAt": 0, "maxResults": 3, "values": [{"id": 1}, {"id": 2}, {"id": 3}]},
                {"startAt": 3, "maxResults": 3, "values": [{"id": 4}]},
            ]
        )
        items = paginate(PageBeanPagination(), request_template, lambda r: client.send(r, "x"))
        assert [i["id"] for i in items] == [1, 2, 3, 4]
        assert len(client.requests) == 2

    @pytest.mark.unit
    def test_stops_on_empty_page_without_page_size(self, request_template, make_client):
        client = make_client(
            [
                {"startAt": 0, "values": [{"id": 1}]},
                {"startAt": 1, "values": []},
            ]
        )
        items = paginate(PageBeanPagination(), request_template, lambda r: client.send(r, "x"))
        assert items == [{"id": 1}]
        assert client.requests[1].get_param("startAt") == "1"
        assert len(client.requests) == 2

    @pytest.mark.unit
    def test_non_pagebean_response_is_single_page(self, request_template, make_client):
        client = make_client([{"values": [{"id": 1}]}])
        items = paginate(PageBeanPagination(), request_template, lambda r: client.send(r, "x"))
        assert items == [{"id": 1}]
        assert len(client.requests) == 1

    @pytest.mark.unit
    def test_configured_page_size_is_sent(self, request_template, make_client):
        client = make_client([{"startAt": 0, "maxResults": 50, "isLast": True, "values": []}])
        strategy = PageBeanPagination.model_validate({"maxResults": 50})
        paginate(strategy, request_template, lambda r: client.send(r, "x"))
        assert client.requests[0].get_param("maxResults") == "50"

    @pytest.mark.unit
    def test_next_page_pointing_at_itself_stops(self, make_client):
        request = RequestDescriptor(url="https://x/items", method="GET", headers={}, query=[("a", "1")])
        client = make_client([{"values": [{"id": 1}], "nextPage": "https://x/items?a=1"}])
        items = paginate(PageBeanPagination(), request, lambda r: client.send(r, "x"))
        assert items == [{"id": 1}]
        assert len(client.requests) == 1


class TestCursorPagination:
    @pytest.mark.unit
    def test_follows_tokens_until_last(self, request_template, make_client):
        client = make_client(
            [
                {"isLast": False, "nextPageToken": "A", "issues": [{"key": "X-1"}]},
                {"isLast": False, "nextPageToken": "B", "issues": [{"key": "X-2"}]},
                {"isLast": True, "issues": [{"key": "X-3"}]},
            ]
        )
        items = paginate(
            cursor_strategy(), request_template, lambda r: client.send(r, "x"), items_path="issues"
        )

        assert items == [{"key": "X-1"}, {"key": "X-2"}, {"key": "X-3"}]
        assert len(client.requests) == 3
        assert client.requests[0].get_param("nextPageToken") is None
        assert client.requests[1].get_param("nextPageToken") == "A"
        assert client.requests[2].get_param("nextPageToken") == "B"
        assert all(r.get_param("maxResults") == "2" for r in client.requests)

    @pytest.mark.unit
    def test_initial_token_is_sent(self, request_template, make_client):
        client = make_client([{"isLast": True, "issues": []}])
        paginate(cursor_strategy(initialToken="T0"), request_template, lambda r: client.send(r, "x"))
        assert client.requests[0].get_param("nextPageToken") == "T0"

    @pytest.mark.unit
    def test_missing_last_field_stops(self, request_template, make_client):
        client = make_client([{"nextPageToken": "A", "issues": [{"key": "X-1"}]}])
        items = paginate(cursor_strategy(), request_template, lambda r: client.send(r, "x"))
        assert items == [{"key": "X-1"}]
        assert len(client.requests) == 1

    @pytest.mark.unit
    def test_custom_last_field(self, request_template, make_client):
        client = make_client(
            [
                {"done": False, "nextPageToken": "A", "data": [1]},
                {"done": True, "data": [2]},
            ]
        )
        items = paginate(
            cursor_strategy(lastField="done"), request_template, lambda r: client.send(r, "x")
        )
        assert items == [1, 2]


class TestFailures:
    @pytest.mark.unit
    def test_http_error_on_later_page_discards_results(self, request_template, make_client):
        client = make_client(
            [{"isLast": False, "nextPageToken": "A", "issues": [{"key": "X-1"}]}],
            errors={1: HttpError(500, "getIssues")},
        )
        with pytest.raises(HttpError) as e:
            paginate(cursor_strategy(), request_template, lambda r: client.send(r, "x"))
        assert e.value.status_code == 500
        assert len(client.requests) == 2

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "strategy",
        [
            OffsetPagination.model_validate(
                {"offsetField": "offset", "limitField": "limit", "defaultLimit": 10}
            ),
            UnsupportedPagination(raw="pages"),
        ],
    )
    def test_unsupported_modes_raise_before_io(self, strategy, request_template, make_client):
        client = make_client([])
        with pytest.raises(UnsupportedPaginationError):
            paginate(strategy, request_template, lambda r: client.send(r, "x"), endpoint_name="e")
        assert client.requests == []


class TestPageBeanSelfLink:
    @pytest.mark.unit
    def test_differently_encoded_self_link_stops(self, make_client):
        request = RequestDescriptor(
            url="https://x/items", method="GET", headers={}, query=[("jql", "a b")]
        )
        client = make_client(
            [{"values": [{"id": 1}], "nextPage": "https://x/items?jql=a%20b"}]
        )
        items = paginate(PageBeanPagination(), request, lambda r: client.send(r, "x"))
        assert items == [{"id": 1}]
        assert len(client.requests) == 1

    @pytest.mark.unit
    def test_reordered_self_link_stops(self, make_client):
        request = RequestDescriptor(
            url="https://x/items", method="GET", headers={}, query=[("a", "1"), ("b", "2")]
        )
        client = make_client([{"values": [{"id": 1}], "nextPage": "https://x/items?b=2&a=1"}])
        items = paginate(PageBeanPagination(), request, lambda r: client.send(r, "x"))
        assert items == [{"id": 1}]
        assert len(client.requests) == 1
