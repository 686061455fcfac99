"""
Unit tests for connector request handling.
"""

import pytest

from json_connector.common.errors import (
    CacheCapacityError,
    EmptyContentError,
    FieldIdentificationError,
    InvalidSchemaError,
    InvalidUrlError,
    TransportError,
)
from json_connector.ingest.connector import (
    ConfigParams,
    ConnectorRequest,
    get_auth_type,
    get_config,
    is_admin_user,
    is_empty_content,
)

URL = "https://api.example.com/users"

USERS = [
    {"Name": "Ann", "age": 30, "site": "http://ann.example.com",
     "joined": "2020-01-02T03:00:00Z", "address": {"city": "Oslo"}},
    {"Name": "Bob", "age": 41, "site": "http://bob.example.com",
     "joined": "2021-06-07T08:00:00Z", "address": {"city": "Rome"}},
]


def request(url=URL, fields=None, **config):
    payload = {"configParams": {"url": url, **config}}
    if fields is not None:
        payload["fields"] = [{"name": name} for name in fields]
    return ConnectorRequest.model_validate(payload)


class TestRequestModels:

    def test_defaults(self):
        parsed = ConnectorRequest.model_validate({})
        assert parsed.config_params.url is None
        assert parsed.config_params.cache is False
        assert parsed.fields is None

    def test_expiry_accepts_number_or_text(self):
        assert ConfigParams(cache_expiry_time=5).cache_expiry_time == 5
        assert ConfigParams(cache_expiry_time="5").cache_expiry_time == "5"


class TestEmptyContent:

    @pytest.mark.parametrize("content", [None, "", 0, 0.0, False])
    def test_empty(self, content):
        assert is_empty_content(content)

    @pytest.mark.parametrize("content", [[], {}, [0], "x", 1, True])
    def test_not_empty(self, content):
        assert not is_empty_content(content)


class TestFetchData:

    @pytest.mark.parametrize("url", [
        None, "", "ftp://x.example", "example.com", "http://",
        "http://x.co\n", "https://x.co\nhttps://y.co",
    ])
    def test_invalid_url(self, make_connector, url):
        connector, fetcher = make_connector()

        with pytest.raises(InvalidUrlError) as exc:
            connector.fetch_data(ConfigParams(url=url))
        assert exc.value.message == f'"{url}" is not a valid url.'
        assert fetcher.calls == []

    def test_fetches_without_cache(self, make_connector, memory_store):
        connector, fetcher = make_connector({URL: USERS})

        assert connector.fetch_data(ConfigParams(url=URL)) == USERS
        assert connector.fetch_data(ConfigParams(url=URL)) == USERS
        assert fetcher.calls == [URL, URL]
        assert memory_store.size() == 0

    def test_cache_serves_second_request(self, make_connector, memory_store):
        connector, fetcher = make_connector({URL: USERS})
        config = ConfigParams(url=URL, cache=True, cache_expiry_time="5")

        assert connector.fetch_data(config) == USERS
        assert connector.fetch_data(config) == USERS
        assert fetcher.calls == [URL]
        assert memory_store.size() == len(USERS) + 1

    def test_oversized_row_is_cache_capacity_error(self, make_connector):
        connector, _ = make_connector({URL: [{"blob": "x" * 5000}]})

        with pytest.raises(CacheCapacityError) as exc:
            connector.fetch_data(ConfigParams(url=URL, cache=True))
        assert "100KB cache limit" in exc.value.message

    @pytest.mark.parametrize("content", [None, "", 0, False])
    def test_empty_content(self, make_connector, content):
        connector, _ = make_connector({URL: content})

        with pytest.raises(EmptyContentError):
            connector.fetch_data(ConfigParams(url=URL))

    def test_transport_error_propagates(self, make_connector):
        error = TransportError(URL, RuntimeError("503"))
        connector, _ = make_connector(error=error)

        with pytest.raises(TransportError):
            connector.fetch_data(ConfigParams(url=URL))


class TestGetSchema:

    def test_schema(self, make_connector):
        connector, _ = make_connector({URL: USERS})

        schema = connector.get_schema(request())["schema"]

        by_id = {field["id"]: field for field in schema}
        assert list(by_id) == ["name", "age", "site", "joined", "address.city"]
        assert by_id["name"]["name"] == "Name"
        assert by_id["age"]["semanticType"] == "NUMBER"
        assert by_id["age"]["conceptType"] == "METRIC"
        assert by_id["site"]["semanticType"] == "URL"
        assert by_id["joined"]["semanticType"] == "YEAR_MONTH_DAY_HOUR"
        assert by_id["address.city"]["conceptType"] == "DIMENSION"

    def test_empty_array_is_invalid_schema(self, make_connector):
        connector, _ = make_connector({URL: []})

        with pytest.raises(InvalidSchemaError):
            connector.get_schema(request())

    def test_array_of_scalars_is_invalid_schema(self, make_connector):
        connector, _ = make_connector({URL: [1, 2]})

        with pytest.raises(InvalidSchemaError):
            connector.get_schema(request())

    def test_empty_key_cannot_be_identified(self, make_connector):
        connector, _ = make_connector({URL: {"": 1}})

        with pytest.raises(FieldIdentificationError):
            connector.get_schema(request())


class TestGetData:

    def test_rows_in_requested_order(self, make_connector):
        connector, _ = make_connector({URL: USERS})

        result = connector.get_data(request(fields=["address.city", "name", "joined", "age"]))

        assert [field["id"] for field in result["schema"]] == ["address.city", "name", "joined", "age"]
        assert result["rows"] == [
            {"values": ["Oslo", "Ann", "2020010203", 30]},
            {"values": ["Rome", "Bob", "2021060708", 41]},
        ]

    def test_unknown_fields_dropped(self, make_connector):
        connector, _ = make_connector({URL: USERS})

        result = connector.get_data(request(fields=["nope", "age"]))

        assert [field["id"] for field in result["schema"]] == ["age"]
        assert result["rows"] == [{"values": [30]}, {"values": [41]}]

    def test_no_fields(self, make_connector):
        connector, _ = make_connector({URL: USERS})

        result = connector.get_data(request())
        assert result == {"schema": [], "rows": [{"values": []}, {"values": []}]}

    def test_single_object_payload(self, make_connector):
        connector, _ = make_connector({URL: {"id": 7, "tags": ["a", "b"]}})

        result = connector.get_data(request(fields=["tags", "id"]))
        assert result["rows"] == [{"values": ['["a","b"]', 7]}]

    def test_cached_data_matches_uncached(self, make_connector):
        connector, fetcher = make_connector({URL: USERS})
        fields = ["name", "address.city"]

        fresh = connector.get_data(request(fields=fields, cache=True))
        cached = connector.get_data(request(fields=fields, cache=True))

        assert fresh == cached
        assert fetcher.calls == [URL]


class TestHostHooks:

    def test_config_form(self):
        config = get_config()
        names = [param["name"] for param in config["configParams"]]
        assert names == ["instructions", "url", "cache", "cache_expiry_time"]
        assert config["dateRangeRequired"] is False

    def test_auth_type(self):
        assert get_auth_type() == {"type": "NONE"}

    def test_admin(self):
        assert is_admin_user() is True
