import json

import pytest
import responses

from metaplay.http_client import HttpClient, RequestError

BASE = "https://portal.example.com"


@pytest.fixture
def client():
    return HttpClient("token", BASE, "1.2.3")


@pytest.fixture
def mock_http():
    with responses.RequestsMock() as rsps:
        yield rsps


def test_get_decodes_json_and_sends_headers(mock_http, client):
    mock_http.add(responses.GET, f"{BASE}/api/v1/items", json={"a": 1})
    assert client.get("/api/v1/items") == {"a": 1}
    headers = mock_http.calls[0].request.headers
    assert headers["Authorization"] == "Bearer token"
    assert headers["X-Application-Name"] == "MetaplayCLI/1.2.3"


def test_get_as_text(mock_http, client):
    mock_http.add(responses.GET, f"{BASE}/plain", body="hello world")
    assert client.get("/plain", as_text=True) == "hello world"


def test_error_status_raises(mock_http, client):
    mock_http.add(responses.GET, f"{BASE}/missing", status=404)
    with pytest.raises(RequestError) as info:
        client.get("/missing")
    assert info.value.status_code == 404
    assert "404" in str(info.value)


def test_post_sends_json_body(mock_http, client):
    mock_http.add(responses.POST, f"{BASE}/things", json={"ok": True})
    body = {"name": "thing", "count": 3}
    assert client.post("/things", body) == {"ok": True}
    assert json.loads(mock_http.calls[0].request.body) == body


def test_put_sends_json_body(mock_http, client):
    mock_http.add(responses.PUT, f"{BASE}/contract_signatures", json={"signed": True})
    assert client.put("/contract_signatures", {"contract_id": "c1"}) == {"signed": True}
    assert json.loads(mock_http.calls[0].request.body) == {"contract_id": "c1"}


def test_delete_without_body(mock_http, client):
    mock_http.add(responses.DELETE, f"{BASE}/things/1", json=[1, 2])
    assert client.delete("/things/1") == [1, 2]
    assert mock_http.calls[0].request.body is None


def test_invalid_json_raises(mock_http, client):
    mock_http.add(responses.GET, f"{BASE}/broken", body="not json")
    with pytest.raises(RequestError):
        client.get("/broken")


def test_connection_failure_raises(mock_http, client):
    with pytest.raises(RequestError) as info:
        client.get("/unregistered")
    assert info.value.status_code is None


def test_unsupported_method(client):
    with pytest.raises(ValueError):
        client.request("PATCH", "/x")


def test_download_writes_file(mock_http, client, tmp_path):
    mock_http.add(responses.GET, f"{BASE}/sdk/download", body=b"zipdata")
    target = tmp_path / "sdk.zip"
    response = client.download("/sdk/download", target)
    assert response.status_code == 200
    assert target.read_bytes() == b"zipdata"


def test_download_error_still_creates_file(mock_http, client, tmp_path):
    mock_http.add(responses.GET, f"{BASE}/sdk/download", status=403, body=b"denied")
    target = tmp_path / "sdk.zip"
    response = client.download("/sdk/download", target)
    assert response.status_code == 403
    assert target.exists()