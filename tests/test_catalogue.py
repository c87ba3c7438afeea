"""Tests for the catalogue client."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from api_search.catalogue.client import fetch_self_description, load_endpoints
from api_search.core.exceptions import CatalogueError
from api_search.core.models import CatalogueEndpoint


@pytest.fixture
def endpoint():
    return CatalogueEndpoint(host="10.0.0.5", port=8080)


def _response(payload=None, error=None):
    response = MagicMock()
    response.raise_for_status = MagicMock(side_effect=error)
    if isinstance(payload, Exception):
        response.json = MagicMock(side_effect=payload)
    else:
        response.json = MagicMock(return_value=payload)
    return response


class TestFetchSelfDescription:
    def test_returns_json_object(self, endpoint):
        with patch("api_search.catalogue.client.requests.get", return_value=_response({"info": {}})) as get:
            assert fetch_self_description(endpoint, timeout=3) == {"info": {}}
        get.assert_called_once_with("http://10.0.0.5:8080/", timeout=3)

    def test_transport_error(self, endpoint):
        with patch(
            "api_search.catalogue.client.requests.get",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            with pytest.raises(CatalogueError, match="10.0.0.5:8080"):
                fetch_self_description(endpoint)

    def test_http_error(self, endpoint):
        response = _response({}, error=requests.exceptions.HTTPError("500"))
        with patch("api_search.catalogue.client.requests.get", return_value=response):
            with pytest.raises(CatalogueError):
                fetch_self_description(endpoint)

    @pytest.mark.parametrize("payload", [ValueError("bad json"), ["not", "an", "object"]])
    def test_bad_body(self, endpoint, payload):
        with patch("api_search.catalogue.client.requests.get", return_value=_response(payload)):
            with pytest.raises(CatalogueError):
                fetch_self_description(endpoint)

    def test_uses_session(self, endpoint):
        session = MagicMock()
        session.get.return_value = _response({"ok": True})
        assert fetch_self_description(endpoint, session=session) == {"ok": True}


class TestLoadEndpoints:
    def test_accepts_both_key_styles(self, tmp_path):
        path = tmp_path / "endpoints.json"
        path.write_text(json.dumps([
            {"host": "10.0.0.1", "port": 8080},
            {"IpAddress": "10.0.0.2", "Port": "9090", "path": "/openapi.json"},
        ]))

        endpoints = load_endpoints(path)

        assert endpoints[0] == CatalogueEndpoint(host="10.0.0.1", port=8080)
        assert endpoints[1].url == "http://10.0.0.2:9090/openapi.json"

    @pytest.mark.parametrize("content", ['{"host": "x"}', "[1]", '[{"host": "x"}]', "nope"])
    def test_invalid_files(self, tmp_path, content):
        path = tmp_path / "endpoints.json"
        path.write_text(content)
        with pytest.raises(CatalogueError):
            load_endpoints(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogueError):
            load_endpoints(tmp_path / "missing.json")
